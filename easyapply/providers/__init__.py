from .base import ProviderStrategy, EASY_APPLY_TEXT_MARKERS
from .dice import STRATEGY as DICE
from .indeed import STRATEGY as INDEED
from .linkedin import STRATEGY as LINKEDIN

from easyapply.log import get_logger

log = get_logger(__name__)

__all__ = [
    "ProviderStrategy", "EASY_APPLY_TEXT_MARKERS",
    "LINKEDIN", "INDEED", "DICE",
    "get_provider", "available_providers",
]

_REGISTRY: dict[str, ProviderStrategy] = {
    "linkedin": LINKEDIN,
    "indeed": INDEED,
    "dice": DICE,
}


def available_providers() -> list[str]:
    return sorted(_REGISTRY)


def get_provider(name: str) -> ProviderStrategy:
    key = name.strip().lower()
    if key not in _REGISTRY:
        raise ValueError(
            f"Unknown provider {name!r} (expected one of: {', '.join(available_providers())})"
        )
    strategy = _REGISTRY[key]
    log.info("Using provider: %s", strategy.name)
    return strategy
