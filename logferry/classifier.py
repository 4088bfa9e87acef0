"""Connectivity classifier: is a link good enough, and did it just get better?"""

from logferry.models import TOP_TIER_GENERATIONS, ConnectivitySnapshot, Medium


def is_strong(snapshot: ConnectivitySnapshot) -> bool:
    """True when events can go straight to the remote sink."""
    if not snapshot.is_connected:
        return False
    if snapshot.medium is Medium.WIFI:
        return True
    return (
        snapshot.medium is Medium.CELLULAR
        and snapshot.cellular_generation in TOP_TIER_GENERATIONS
    )


def is_upgrade(previous: ConnectivitySnapshot | None,
               current: ConnectivitySnapshot | None) -> bool:
    """Decide whether a connectivity change moved from a weak to a strong link.

    Rules, first match wins:
        - no previous snapshot (startup) and current is wifi;
        - previous was none or unknown and current is wifi;
        - cellular to cellular where the previous generation was known and
          below top tier and the current one is top tier.

    Anything else, including missing or ambiguous data, is not an upgrade.
    """
    if current is None:
        return False

    if previous is None:
        return current.medium is Medium.WIFI

    if previous.medium in (Medium.NONE, Medium.UNKNOWN) and current.medium is Medium.WIFI:
        return True

    if previous.medium is Medium.CELLULAR and current.medium is Medium.CELLULAR:
        return (
            previous.cellular_generation is not None
            and previous.cellular_generation not in TOP_TIER_GENERATIONS
            and current.cellular_generation in TOP_TIER_GENERATIONS
        )

    return False
