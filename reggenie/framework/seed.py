"""Static reference data: seed regulations, build history, region maps."""

from typing import Dict, List

from reggenie.models.regulation import (
    RegulationEntry, Region, Category, ImpactLevel, RegulationStatus,
)
from reggenie.models.records import BuildRequirement


INITIAL_REGULATIONS: List[RegulationEntry] = sorted(
    [
        RegulationEntry(
            id="15",
            tracking_id="REG-2024-015",
            title="MHRA AI Airlock: Regulatory Sandbox for AI Medical Devices",
            agency="MHRA",
            region=Region.UK.value,
            country="United Kingdom",
            date="2024-05-09",
            effective_date="2024-05-09",
            category=Category.MEDICAL_DEVICES.value,
            summary="Launch of the AI Airlock, a regulatory sandbox to assist in the safe development and deployment of AI as a Medical Device (AIaMD).",
            impact=ImpactLevel.HIGH.value,
            status=RegulationStatus.FINAL.value,
            content="The AI Airlock is a collaborative regulatory sandbox designed to test and support AIaMD products in the NHS. It aims to identify and address regulatory challenges for AI devices early in the development process, fostering innovation while ensuring patient safety.",
            url="https://www.gov.uk/government/news/mhra-launches-ai-airlock-to-address-challenges-for-regulating-medical-devices-that-use-artificial-intelligence",
        ),
        RegulationEntry(
            id="14",
            tracking_id="REG-2025-014",
            title="ICH E6(R3) Guideline for Good Clinical Practice",
            agency="ICH",
            region=Region.GLOBAL.value,
            country="Global",
            date="2025-01-06",
            effective_date="2025-07-23",
            category=Category.CLINICAL_RESEARCH.value,
            summary="Final revision of the GCP guideline introducing risk-proportionate, quality-by-design trial conduct.",
            impact=ImpactLevel.HIGH.value,
            status=RegulationStatus.FINAL.value,
            content="E6(R3) restructures GCP into principles and annexes, emphasising proportionate risk-based approaches, decentralised elements and data governance across the trial lifecycle.",
            url="https://database.ich.org/sites/default/files/ICH_E6%28R3%29_Step4_FinalGuideline_2025_0106.pdf",
        ),
        RegulationEntry(
            id="13",
            tracking_id="REG-2023-013",
            title="EU GMP Annex 1: Manufacture of Sterile Medicinal Products",
            agency="EMA",
            region=Region.EU.value,
            country="European Union",
            date="2022-08-25",
            effective_date="2023-08-25",
            category=Category.MANUFACTURING.value,
            summary="Revised Annex 1 requiring a contamination control strategy for sterile manufacturing.",
            impact=ImpactLevel.HIGH.value,
            status=RegulationStatus.FINAL.value,
            content="The revision introduces the contamination control strategy (CCS), quality risk management principles and updated requirements for barrier technologies and environmental monitoring.",
            url="https://health.ec.europa.eu/system/files/2022-08/20220825_gmp-an1_en_0.pdf",
        ),
        RegulationEntry(
            id="12",
            tracking_id="REG-2024-012",
            title="FDA Draft Guidance: Considerations for the Use of AI to Support Regulatory Decision-Making for Drug and Biological Products",
            agency="FDA",
            region=Region.US.value,
            country="United States",
            date="2025-01-07",
            effective_date="TBD",
            category=Category.DRUG_DEVELOPMENT.value,
            summary="Risk-based credibility assessment framework for AI models used in drug development submissions.",
            impact=ImpactLevel.MEDIUM.value,
            status=RegulationStatus.DRAFT.value,
            content="The draft guidance proposes a seven-step credibility assessment framework for AI models that produce data supporting regulatory decisions on safety, effectiveness or quality.",
            url="https://www.fda.gov/regulatory-information/search-fda-guidance-documents",
        ),
        RegulationEntry(
            id="11",
            tracking_id="REG-2024-011",
            title="PMDA Consultation on Electronic Records in Clinical Trials",
            agency="PMDA",
            region=Region.APAC.value,
            country="Japan",
            date="2024-10-15",
            effective_date="Pending",
            category=Category.DATA_INTEGRITY.value,
            summary="Consultation on expectations for electronic source data and audit trails in Japanese trials.",
            impact=ImpactLevel.LOW.value,
            status=RegulationStatus.CONSULTATION.value,
            content="The consultation sets out expectations for validation of electronic systems, audit trail review and retention of electronic source records.",
        ),
    ],
    key=lambda r: r.date,
    reverse=True,
)


SYSTEM_BUILD_HISTORY: List[BuildRequirement] = [
    BuildRequirement(
        id="BR-001",
        version="1.0.0",
        timestamp=1738150000000,
        prompt="built a regulatory intelligence data base to evaluate the regulatory changes for Health care, focusing GMP, GCP, PV an",
        scope=["Core Platform", "Regulatory Intelligence Module", "Database Schema"],
    ),
    BuildRequirement(
        id="BR-002",
        version="1.1.0",
        timestamp=1738160000000,
        prompt="Requirement Tracking should include all the prompt provided to built this application as of now",
        scope=["Audit Trail Interface", "Requirement Traceability Matrix"],
    ),
    BuildRequirement(
        id="BR-003",
        version="1.2.0",
        timestamp=1738165000000,
        prompt="Remove Regulatory Intelligence",
        scope=["UI Refactoring", "Requirement Tracking Simplification"],
    ),
    BuildRequirement(
        id="BR-004",
        version="1.3.0",
        timestamp=1738170000000,
        prompt="Add Traditional Chinese",
        scope=["Translation Engine Localization", "Voice Synthesis Locale Mapping"],
    ),
    BuildRequirement(
        id="BR-005",
        version="1.3.1",
        timestamp=1738175000000,
        prompt="track the requirement from the start of building this platform",
        scope=["Lifecycle Audit Logging", "Version Control History"],
    ),
    BuildRequirement(
        id="BR-006",
        version="1.4.0",
        timestamp=1738180000000,
        prompt="list all the requirements and prompts in requirement tracking",
        scope=["Comprehensive Audit View", "Requirement Inventory Update"],
    ),
    BuildRequirement(
        id="BR-007",
        version="1.5.0",
        timestamp=1738185000000,
        prompt="Enhance the application by adding features related to data integrity, such as input validation and audit trails for user actions",
        scope=["Data Integrity Framework", "User Action Audit Log", "Real-time Input Validation"],
    ),
    BuildRequirement(
        id="BR-008",
        version="1.6.0",
        timestamp=1738190000000,
        prompt="For report builder include Digital Notes, Link to Digital Notes fetching and adding contextually, Voice upload option, integrating with meeting minutes field to generate Report",
        scope=["Multi-modal Input Pipeline", "Neural Audio Transcription", "Correlated Data Synthesis"],
    ),
    BuildRequirement(
        id="BR-009",
        version="1.7.0",
        timestamp=1738195000000,
        prompt="In the Clinical Visit Context, incorporate Template upon which report needs to be generated as reference. Also create include option to create confirmation letter for upcoming visit based on key follow up items and Create option for generating the follow up letter from the follow up item identified in the Monitoring Visit Report Summary",
        scope=["Correspondence Engine", "Follow-up Letter Automation", "Confirmation Letter Integration", "Template Contextualization"],
    ),
    BuildRequirement(
        id="BR-010",
        version="1.8.0",
        timestamp=1738200000000,
        prompt="Final deployment of clinical surveillance engine with template file upload and summary-based PI correspondence automation.",
        scope=["Template Docx Support", "PI Correspondence AI", "Microphone Permissions", "UI Synchronization"],
    ),
]


REGION_SHORT_NAMES: Dict[str, str] = {
    Region.US.value: "US",
    Region.EU.value: "EU",
    Region.APAC.value: "APAC",
    Region.GLOBAL.value: "Global",
    Region.UK.value: "UK",
}


REGION_COUNTRY_MAP: Dict[str, List[str]] = {
    Region.US.value: ["United States", "Canada", "Mexico"],
    Region.EU.value: [
        "European Union", "Germany", "France", "Italy", "Spain", "Netherlands",
        "Switzerland", "Belgium", "Austria", "Sweden", "Norway", "Denmark",
        "Finland", "Ireland", "Poland", "Portugal", "Greece", "Czech Republic",
    ],
    Region.APAC.value: [
        "Japan", "China", "India", "Australia", "Singapore", "South Korea",
        "New Zealand", "Taiwan", "Thailand", "Vietnam", "Malaysia", "Indonesia",
    ],
    Region.UK.value: ["United Kingdom"],
    Region.GLOBAL.value: [
        "Global", "WHO", "ICH", "Brazil", "Argentina", "South Africa",
        "Saudi Arabia", "UAE", "Turkey", "Israel", "Egypt", "Nigeria",
    ],
}


def get_region_for_country(country: str) -> str:
    """Map a country onto its regulatory region, defaulting to Global."""
    for region, countries in REGION_COUNTRY_MAP.items():
        if country in countries:
            return region
    return Region.GLOBAL.value
