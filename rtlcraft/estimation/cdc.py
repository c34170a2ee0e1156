"""Clock domain crossing analysis over named clock domains."""

import logging
from itertools import combinations
from typing import Iterable, List

from rtlcraft.model import CdcAnalysis, CdcIssue, ClockDomain, SynchronizerRequirement

logger = logging.getLogger(__name__)

# Frequency ratios outside [1/LARGE_RATIO, LARGE_RATIO] risk metastability
LARGE_RATIO = 2.0
# Ratio above which a third synchronizer stage is recommended
THREE_STAGE_RATIO = 4.0


def analyze_clock_domains(domains: Iterable[ClockDomain]) -> CdcAnalysis:
    """
    Check every pair of clock domains running at different frequencies.

    Each such pair counts as one crossing and needs a flip-flop
    synchronizer; pairs whose frequency ratio exceeds 2 (either way) are
    also reported as potential issues.
    """
    domains = list(domains)
    synchronizers: List[SynchronizerRequirement] = []
    issues: List[CdcIssue] = []

    for first, second in combinations(domains, 2):
        if first.frequency_mhz == second.frequency_mhz:
            continue

        ratio = first.frequency_mhz / second.frequency_mhz
        synchronizers.append(
            SynchronizerRequirement(
                from_domain=first.name,
                to_domain=second.name,
                recommended_stages=3 if ratio > THREE_STAGE_RATIO else 2,
            )
        )
        if ratio > LARGE_RATIO or ratio < 1 / LARGE_RATIO:
            issues.append(
                CdcIssue(
                    from_domain=first.name,
                    to_domain=second.name,
                    frequency_ratio=round(ratio, 3),
                    issue="Large frequency difference may cause metastability",
                )
            )

    recommendations = []
    if synchronizers:
        recommendations.extend(
            [
                "Use multi-stage flip-flop synchronizers for CDC",
                "Add timing constraints for clock domain crossings",
            ]
        )
    if issues:
        recommendations.extend(
            [
                "Consider FIFO-based CDC for large frequency ratios",
                "Implement proper handshaking protocols",
            ]
        )

    logger.debug("%d clock domains, %d crossings", len(domains), len(synchronizers))
    return CdcAnalysis(
        total_crossings=len(synchronizers),
        synchronizers_needed=synchronizers,
        potential_issues=issues,
        recommendations=recommendations,
    )
