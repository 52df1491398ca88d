"""HealthBuddy — Географічні фактори ризику"""

from typing import List, Optional, Union

from health_buddy.schemas import ChoiceId, EvidenceItem, EvidenceSource, TravelRegion


# Регіон → ID фактора ризику Infermedica
REGION_RISK_FACTORS = {
    TravelRegion.NORTH_AMERICA: "p_13",
    TravelRegion.EUROPE: "p_15",
    TravelRegion.ASIA: "p_236",
    TravelRegion.AFRICA: "p_17",
    TravelRegion.SOUTH_AMERICA: "p_14",
    TravelRegion.OCEANIA: "p_19",
    TravelRegion.MIDDLE_EAST: "p_21",
}


def geographic_risk_factors(location: Optional[Union[TravelRegion, str]]) -> List[EvidenceItem]:
    """Докази з source=predefined для регіону нещодавньої подорожі"""
    if not location:
        return []

    region = TravelRegion(location)
    risk_factor_id = REGION_RISK_FACTORS.get(region)
    if risk_factor_id is None:
        return []

    return [
        EvidenceItem(
            id=risk_factor_id,
            choice_id=ChoiceId.PRESENT,
            source=EvidenceSource.PREDEFINED,
            name=f"Recent travel: {region.value}",
        )
    ]
