# okcoin/modules/common/format.py
from __future__ import annotations

COIN_EMOJI = "🪙"

def fmt_coins(amount: int) -> str:
    """
    Montant entier → string lisible avec séparateur de milliers.
    Exemple: 12500 → '12 500 🪙'
    """
    n = int(amount)
    sign = "-" if n < 0 else ""
    return f"{sign}{abs(n):,} {COIN_EMOJI}".replace(",", " ")

def fmt_energy(energy: int, max_energy: int) -> str:
    return f"⚡ {int(energy)}/{int(max_energy)}"

def energy_bar(energy: int, max_energy: int, width: int = 10) -> str:
    if max_energy <= 0:
        return "─" * width
    pct = max(0.0, min(1.0, energy / max_energy))
    filled = int(round(pct * width))
    return "█" * filled + "─" * (width - filled)

def medal(rank: int) -> str:
    return "🥇" if rank == 1 else "🥈" if rank == 2 else "🥉" if rank == 3 else f"{rank}."
