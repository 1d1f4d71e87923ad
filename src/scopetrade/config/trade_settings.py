"""Per-user trade settings with the P1/P2/P3 profile system."""

from pydantic import BaseModel, Field, field_validator

from scopetrade.constants.tokens import LAMPORTS_PER_SOL
from scopetrade.constants.trade import DEFAULT_EXPIRATION_SECONDS, EXPIRATION_PRESETS


class TradeProfile(BaseModel):
    """Slippage and fee preferences applied to a trade."""

    slippage_bps: int = Field(
        default=1500,  # 15%
        ge=0,
        le=10000,
        description="Slippage tolerance in basis points",
    )
    priority_lamports: int = Field(
        default=100_000,  # 0.0001 SOL
        ge=0,
        description="Priority fee in lamports",
    )
    tip_lamports: int = Field(
        default=100_000,  # 0.0001 SOL
        ge=0,
        description="Jito tip in lamports",
    )


def _default_profiles() -> list[TradeProfile]:
    return [
        TradeProfile(),
        TradeProfile(slippage_bps=2500),  # P2, more aggressive
        TradeProfile(slippage_bps=5000),  # P3, max speed
    ]


class TradeSettings(BaseModel):
    """Trade settings shared by the quote, instant and trigger flows."""

    profiles: list[TradeProfile] = Field(
        default_factory=_default_profiles, min_length=3, max_length=3
    )
    active_profile_index: int = Field(default=0, ge=0, le=2)

    # SOL amounts for the buy preset buttons
    buy_presets: list[float] = Field(
        default_factory=lambda: [0.25, 0.5, 1.0, 5.0], min_length=4, max_length=4
    )
    # Fraction of balance for the sell preset buttons
    sell_presets: list[float] = Field(
        default_factory=lambda: [0.25, 0.5, 0.75, 1.0], min_length=4, max_length=4
    )

    # Preset taps execute immediately, skipping the confirmation step
    instant_trade: bool = False
    default_expiration_seconds: int = DEFAULT_EXPIRATION_SECONDS

    @field_validator("sell_presets")
    @classmethod
    def validate_sell_presets(cls, v: list[float]) -> list[float]:
        """Sell presets are fractions of the held balance."""
        if any(fraction <= 0 or fraction > 1 for fraction in v):
            raise ValueError("sell presets must be fractions in (0, 1]")
        return v

    @field_validator("default_expiration_seconds")
    @classmethod
    def validate_expiration(cls, v: int) -> int:
        """Default expiration must be one of the presets."""
        allowed = [seconds for _, seconds in EXPIRATION_PRESETS]
        if v not in allowed:
            raise ValueError(f"default expiration must be one of {allowed}")
        return v

    def active_profile(self) -> TradeProfile:
        """Get the currently active profile."""
        return self.profiles[self.active_profile_index]


DEFAULT_TRADE_SETTINGS = TradeSettings()


def format_slippage(bps: int) -> str:
    """Format slippage bps as a percentage string (1500 -> "15%")."""
    pct = bps / 100
    return f"{pct:.0f}%" if bps % 100 == 0 else f"{pct:.1f}%"


def format_lamports(lamports: int) -> str:
    """Format lamports as a SOL string."""
    sol = lamports / LAMPORTS_PER_SOL
    if sol >= 0.01:
        return f"{sol:.2f} SOL"
    if sol >= 0.001:
        return f"{sol:.3f} SOL"
    return f"{sol:.4f} SOL"
