"""スイッチバック（時間分割）ロールアウト戦略

全ユーザーが同じ時刻に同じバリアントを受け取り、一定間隔でバリアントが切り替わる。
ユーザー単位のランダム化が使えないマーケットプレイス全体の施策などに使う。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import Flag
from .rollout import RolloutKind, RolloutStrategy
from .values import Context

Clock = Callable[[], datetime]

_ONE_DAY = timedelta(days=1)


def _as_aware(dt: datetime) -> datetime:
    # naive な datetime はローカル時刻とみなす
    return dt if dt.tzinfo is not None else dt.astimezone()


def _local_midnight() -> datetime:
    return datetime.now().astimezone().replace(hour=0, minute=0, second=0, microsecond=0)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SwitchbackConfig:
    """スイッチバック設定。

    start_time が None の場合は生成日のローカル時刻 0 時を基準にする。
    daily_swap が有効な場合、奇数日はバリアントの順序を逆転させて時間帯の偏りを打ち消す。
    """

    interval_minutes: int = 30
    start_time: datetime | None = None
    daily_swap: bool = False


@dataclass(frozen=True)
class SwitchbackInfo:
    """スイッチバックの現在状態。"""

    current_interval: int
    current_day: int
    time_until_switch: timedelta
    interval_duration: timedelta


class SwitchbackRolloutStrategy(RolloutStrategy):
    """時間区間ごとにバリアントを切り替えるロールアウト戦略。"""

    kind = RolloutKind.SWITCHBACK

    def __init__(
        self,
        config: SwitchbackConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        config = config or SwitchbackConfig()
        if config.interval_minutes <= 0:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.INVALID_CONFIG,
                f"interval_minutes must be positive, got {config.interval_minutes}",
            )
        self._interval = timedelta(minutes=config.interval_minutes)
        self._start_time = _as_aware(config.start_time) if config.start_time else _local_midnight()
        self._daily_swap = config.daily_swap
        self._clock: Clock = clock or _utc_now

    @property
    def interval_duration(self) -> timedelta:
        return self._interval

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @property
    def daily_swap(self) -> bool:
        return self._daily_swap

    def _elapsed(self, now: datetime) -> timedelta:
        elapsed = _as_aware(now) - self._start_time
        if elapsed < timedelta(0):
            raise FeatureFlagError(
                FeatureFlagErrorCodes.SWITCHBACK_NOT_STARTED,
                f"current time {now.isoformat()} is before switchback start "
                f"{self._start_time.isoformat()}",
            )
        return elapsed

    def current_interval(self) -> int:
        """開始時刻から数えた現在の区間番号を返す。"""
        return self._elapsed(self._clock()) // self._interval

    def current_day(self) -> int:
        """開始時刻から数えた現在の日数を返す。"""
        return self._elapsed(self._clock()) // _ONE_DAY

    def time_until_next_switch(self) -> timedelta:
        """次の切り替えまでの残り時間を返す。"""
        now = self._clock()
        interval = self._elapsed(now) // self._interval
        return self._start_time + (interval + 1) * self._interval - _as_aware(now)

    def info(self) -> SwitchbackInfo:
        now = self._clock()
        elapsed = self._elapsed(now)
        interval = elapsed // self._interval
        return SwitchbackInfo(
            current_interval=interval,
            current_day=elapsed // _ONE_DAY,
            time_until_switch=self._start_time + (interval + 1) * self._interval - _as_aware(now),
            interval_duration=self._interval,
        )

    def should_rollout(self, flag: Flag, context: Context | None) -> bool:
        # スイッチバックでは全員が参加する
        return True

    def get_variant(self, flag: Flag, context: Context | None) -> str:
        """現在の時間区間に対応するバリアント名を返す。コンテキストは判定に使わない。"""
        if not flag.has_variants():
            return flag.default_variant

        elapsed = self._elapsed(self._clock())
        count = len(flag.variants)
        index = (elapsed // self._interval) % count
        if self._daily_swap and (elapsed // _ONE_DAY) % 2 == 1:
            index = (count - 1) - index
        return flag.variants[index].name

    def __str__(self) -> str:
        info = self.info()
        seconds = round(info.time_until_switch.total_seconds())
        return (
            f"Switchback: Interval {info.current_interval}, Day {info.current_day}, "
            f"Next switch in {timedelta(seconds=seconds)}"
        )
