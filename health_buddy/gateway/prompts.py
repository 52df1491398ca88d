"""
HealthBuddy — Промпти для генерації пояснень

build_assessment_prompt: аналіз завершеної оцінки для сторінки результатів.
"""

from health_buddy.schemas import AssessmentSnapshot

from .base import TextGenerator


REQUESTED_SECTIONS = [
    "**Clinical Summary**: A clear, professional summary of the patient's presentation",
    "**Risk Assessment**: Analysis of the urgency level and any concerning patterns",
    "**Symptom Correlation**: How the symptoms relate to the top condition",
    "**Risk Factor Impact**: How identified risk factors contribute to the diagnosis",
    "**Next Steps**: Specific recommendations for care level and follow-up",
    "**Patient Education**: Key points the patient should understand about their condition",
    "**Red Flags**: Any warning signs that would require immediate medical attention",
]


def build_assessment_prompt(snapshot: AssessmentSnapshot) -> str:
    """Зібрати промпт з демографії, провідного стану, симптомів та альтернатив"""
    top = snapshot.top_condition
    location = snapshot.location.value if snapshot.location else "Not specified"

    lines = [
        "As a medical AI assistant, provide a comprehensive analysis based on the "
        "following medical assessment data:",
        "",
        "**PATIENT PROFILE:**",
        f"- Age: {snapshot.age} years",
        f"- Sex: {snapshot.sex.value}",
        f"- Location: {location}",
        f"- Assessment Date: {snapshot.timestamp.date().isoformat()}",
        "",
        "**TOP CONDITION ANALYSIS:**",
    ]

    if top is not None:
        lines.append(f"- Condition: {top.display_name}")
        lines.append(f"- Probability: {top.probability * 100:.1f}%")
        if top.details is not None:
            lines.append(f"  * Severity: {top.details.severity or 'Not available'}")
            lines.append(f"  * Acuteness: {top.details.acuteness or 'Not available'}")
            lines.append(f"  * ICD-10 Code: {top.details.icd10 or 'Not available'}")
    else:
        lines.append("- No condition identified")

    symptoms = [e for e in snapshot.present_evidence if not e.is_risk_factor]
    risk_factors = [e for e in snapshot.present_evidence if e.is_risk_factor]

    lines += ["", "**SYMPTOMS PRESENT:**"]
    lines += [f"- {e.name or e.id}" for e in symptoms] or ["- None recorded"]

    lines += ["", "**RISK FACTORS IDENTIFIED:**"]
    lines += [f"- {e.name or e.id}" for e in risk_factors] or ["- None identified"]

    if snapshot.emergencies:
        lines += ["", "**EMERGENCY INDICATORS:**"]
        lines += [f"- {e}" for e in snapshot.emergencies]

    others = sorted(snapshot.conditions, key=lambda c: c.probability, reverse=True)[1:4]
    lines += ["", "**OTHER POSSIBLE CONDITIONS:**"]
    lines += [f"- {c.display_name} ({c.probability * 100:.1f}%)" for c in others] or ["- None"]

    lines += ["", "Based on this medical data, please provide:", ""]
    lines += [f"{i}. {section}" for i, section in enumerate(REQUESTED_SECTIONS, start=1)]
    lines += [
        "",
        "Please write this in clear, professional language suitable for both healthcare "
        "providers and educated patients. Emphasize the importance of professional medical "
        "consultation while providing valuable educational insights.",
    ]

    return "\n".join(lines)


def explain_assessment(snapshot: AssessmentSnapshot, generator: TextGenerator) -> str:
    return generator.generate(build_assessment_prompt(snapshot))
