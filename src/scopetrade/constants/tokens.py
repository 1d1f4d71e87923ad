"""Well-known Solana mints and unit constants."""

from typing import Final

SOL_MINT: Final[str] = "So11111111111111111111111111111111111111112"
USDC_MINT: Final[str] = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT: Final[str] = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"

LAMPORTS_PER_SOL: Final[int] = 1_000_000_000

# Mints whose decimals are known without asking the chain
KNOWN_MINT_DECIMALS: Final[dict[str, int]] = {
    SOL_MINT: 9,
    USDC_MINT: 6,
    USDT_MINT: 6,
}
