"""
Subsidy Catalog

Malaysian government aid programs and rule-based eligibility matching.

DESIGN DECISION: Matching is fully deterministic. A program whose
required profile facts are unknown is never guessed at; it is reported
as needing more information instead.

The built-in catalog can be replaced by a published CSV (for example a
Google Sheet exported as CSV) so program limits can be updated without
a release.
"""

import asyncio
import csv
import io
import time
from typing import TYPE_CHECKING, Optional

import requests
import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from costpilot.config import get_settings
from costpilot.engine.rounding import format_number
from costpilot.models.subsidy import (
    SubsidyMatch,
    SubsidyMatchResult,
    SubsidyProfile,
    SubsidyProgram,
)

if TYPE_CHECKING:
    from costpilot.audit import AuditLogger


logger = structlog.get_logger(__name__)

MOF_BENEFITS_LINK = "https://budget.mof.gov.my/manfaat/"
KPKT_EHOME_LINK = "https://ehome.kpkt.gov.my/"

DEFAULT_PROGRAMS: list[SubsidyProgram] = [
    SubsidyProgram(
        program_id="STR",
        name="Sumbangan Tunai Rahmah (STR)",
        benefit_text="Up to RM 3,700/year for households",
        monthly_benefit=308,
        income_max_monthly=5000,
        household_min=0,
        link="https://bantuantunai.hasil.gov.my/",
        category="Cash Aid",
        required_fields=["income", "householdSize", "state"],
    ),
    SubsidyProgram(
        program_id="SARA",
        name="Sumbangan Asas Rahmah (SARA)",
        benefit_text="RM 100/month for groceries via eWallet",
        monthly_benefit=100,
        income_max_monthly=2500,
        link=MOF_BENEFITS_LINK,
        category="Groceries",
        required_fields=["income"],
    ),
    SubsidyProgram(
        program_id="MySalam",
        name="mySalam Takaful Protection",
        benefit_text="Free health protection & RM8k payout if hospitalized",
        income_max_monthly=8000,
        age_min=18,
        age_max=65,
        category="Health",
        link="https://www.mysalam.com.my/",
        required_fields=["income", "age"],
    ),
    SubsidyProgram(
        program_id="PTPTN-Discount",
        name="PTPTN Repayment Discount",
        benefit_text="10-15% discount on loan repayment",
        link="https://www.ptptn.gov.my/",
        category="Education",
    ),
    SubsidyProgram(
        program_id="eBelia",
        name="e-Tunai Belia Rahmah",
        benefit_text="RM 200 one-off e-wallet credit for youth",
        age_min=18,
        age_max=20,
        requires_student=True,
        link=MOF_BENEFITS_LINK,
        category="Youth",
        required_fields=["age", "employmentStatus"],
    ),
    SubsidyProgram(
        program_id="IPR",
        name="Skim Perumahan Rakyat (IPR / PPR)",
        benefit_text="Affordable housing from RM124k - RM300k",
        monthly_benefit=200,
        income_max_monthly=5000,
        link=KPKT_EHOME_LINK,
        category="Housing",
        required_fields=["income", "state"],
    ),
    SubsidyProgram(
        program_id="PeKa-B40",
        name="PeKa B40 Health Screening",
        benefit_text="Free health screening + RM500 treatment support",
        income_max_monthly=3166,
        age_min=18,
        link="https://www.pekab40.com.my/",
        category="Health",
        required_fields=["income", "age"],
    ),
    SubsidyProgram(
        program_id="SSPN",
        name="SSPN-i Savings (Tax Relief)",
        benefit_text="Tax relief up to RM8,000/year on education savings",
        monthly_benefit=50,
        link="https://www.ptptn.gov.my/sspn-i",
        category="Education",
    ),
    SubsidyProgram(
        program_id="EV-RoadTax",
        name="EV Road Tax Exemption",
        benefit_text="100% road tax exemption for EVs until 2027",
        monthly_benefit=50,
        link="https://www.jpj.gov.my/",
        category="Transport",
    ),
    SubsidyProgram(
        program_id="MyDeposit",
        name="MyDeposit Home Ownership Scheme",
        benefit_text="Up to RM30,000 deposit assistance for first home",
        income_max_monthly=5000,
        link=KPKT_EHOME_LINK,
        category="Housing",
        required_fields=["income", "state"],
    ),
    SubsidyProgram(
        program_id="SOCSO-SIP",
        name="SOCSO Self-Employment (SIP)",
        benefit_text="Social security coverage for self-employed / gig workers",
        link="https://www.perkeso.gov.my/",
        category="Employment",
        required_fields=["employmentStatus"],
        employment_restriction="self-employed",
    ),
]


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def _number(value: Optional[str]) -> Optional[float]:
    value = _clean(value)
    return float(value) if value is not None else None


def _whole(value: Optional[str]) -> Optional[int]:
    number = _number(value)
    return int(number) if number is not None else None


def parse_catalog_csv(text: str) -> list[SubsidyProgram]:
    """
    Parse a catalog CSV with a header row.

    Recognised columns: programId, name, benefitText, incomeMaxMonthly,
    ageMin, ageMax, category, link, requiresStudent, householdMin.
    Rows without a programId or name are skipped, as are rows with
    unparseable numbers.
    """
    programs = []
    for row in csv.DictReader(io.StringIO(text)):
        program_id = _clean(row.get("programId"))
        name = _clean(row.get("name"))
        if not program_id or not name:
            continue
        try:
            programs.append(SubsidyProgram(
                program_id=program_id,
                name=name,
                benefit_text=_clean(row.get("benefitText")) or "",
                income_max_monthly=_number(row.get("incomeMaxMonthly")),
                age_min=_whole(row.get("ageMin")),
                age_max=_whole(row.get("ageMax")),
                category=_clean(row.get("category")),
                link=_clean(row.get("link")),
                requires_student=(row.get("requiresStudent") or "").strip().lower() == "true",
                household_min=_whole(row.get("householdMin")),
            ))
        except ValueError as e:
            logger.warning("subsidy_row_skipped", program_id=program_id, error=str(e))
    return programs


def _missing_fields(program: SubsidyProgram, profile: SubsidyProfile) -> list[str]:
    known = {
        "income": bool(profile.income),
        "age": bool(profile.age),
        "state": bool(profile.state),
        "householdSize": bool(profile.household_size),
        "employmentStatus": bool(profile.employment_status),
    }
    return [field for field in program.required_fields if not known.get(field, True)]


def match_program(program: SubsidyProgram, profile: SubsidyProfile) -> SubsidyMatch:
    """Decide eligibility of one profile for one program."""
    base = program.model_dump()

    missing = _missing_fields(program, profile)
    if missing:
        return SubsidyMatch(
            **base,
            eligible=False,
            match_confidence=0.5,
            reasons=[f"Need more info: {', '.join(missing)}"],
            missing_fields=missing,
            needs_info=True,
        )

    income = profile.income
    age = profile.age
    household_size = profile.household_size or 1
    reasons = []

    if program.income_max_monthly is not None and income > program.income_max_monthly:
        reasons.append(
            f"Income RM{format_number(income)} exceeds limit "
            f"RM{format_number(program.income_max_monthly)}"
        )

    if program.age_min is not None and age < program.age_min:
        reasons.append(f"Age {age} below minimum {program.age_min}")
    if program.age_max is not None and age > program.age_max:
        reasons.append(f"Age {age} exceeds maximum {program.age_max}")

    if program.requires_student and profile.employment_status != "student":
        reasons.append("Requires student status")

    if (
        program.employment_restriction
        and profile.employment_status != program.employment_restriction
    ):
        reasons.append(f"Requires {program.employment_restriction} status")

    if program.household_min is not None and household_size < program.household_min:
        reasons.append(
            f"Household size {household_size} below minimum {program.household_min}"
        )

    if reasons:
        return SubsidyMatch(**base, eligible=False, match_confidence=0.0, reasons=reasons)
    return SubsidyMatch(
        **base,
        eligible=True,
        match_confidence=1.0,
        reasons=["Meets all criteria"],
    )


class SubsidyCatalog:
    """
    Holds the current program list and matches profiles against it.

    Usage:
        catalog = SubsidyCatalog()
        await catalog.refresh_if_stale()
        result = catalog.match(SubsidyProfile(income=2400, age=30))
    """

    def __init__(
        self,
        programs: Optional[list[SubsidyProgram]] = None,
        csv_url: Optional[str] = None,
        refresh_interval_seconds: Optional[int] = None,
        session: Optional[requests.Session] = None,
        audit_logger: Optional["AuditLogger"] = None,
    ):
        settings = get_settings().subsidies
        self._programs = list(programs if programs is not None else DEFAULT_PROGRAMS)
        self._csv_url = csv_url if csv_url is not None else settings.catalog_csv_url
        self._refresh_interval = (
            refresh_interval_seconds
            if refresh_interval_seconds is not None
            else settings.refresh_interval_seconds
        )
        self._session = session or requests.Session()
        self._last_refresh: Optional[float] = None
        self._audit_logger = audit_logger

    @property
    def programs(self) -> list[SubsidyProgram]:
        return list(self._programs)

    @property
    def source(self) -> str:
        return self._csv_url or "built-in"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _fetch_csv(self) -> str:
        response = self._session.get(self._csv_url, timeout=15)
        response.raise_for_status()
        return response.text

    async def refresh(self) -> int:
        """
        Re-load the catalog from the CSV source.

        Returns the number of programs loaded, or 0 when the existing
        catalog was kept (no source, fetch failure or an empty sheet).
        """
        self._last_refresh = time.monotonic()
        if not self._csv_url:
            logger.info("subsidy_catalog_builtin", program_count=len(self._programs))
            return 0

        try:
            text = await asyncio.to_thread(self._fetch_csv)
        except requests.RequestException as e:
            logger.warning("subsidy_catalog_fetch_failed", url=self._csv_url, error=str(e))
            if self._audit_logger is not None:
                await self._audit_logger.log_external_service_error("subsidy_catalog", str(e))
            return 0

        programs = parse_catalog_csv(text)
        if not programs:
            logger.warning("subsidy_catalog_empty", url=self._csv_url)
            return 0

        self._programs = programs
        logger.info("subsidy_catalog_refreshed", program_count=len(programs))
        if self._audit_logger is not None:
            await self._audit_logger.log_catalog_refreshed(self._csv_url, len(programs))
        return len(programs)

    async def refresh_if_stale(self) -> int:
        """Refresh when the interval has passed since the last attempt."""
        if (
            self._last_refresh is not None
            and time.monotonic() - self._last_refresh < self._refresh_interval
        ):
            return 0
        return await self.refresh()

    def match(self, profile: SubsidyProfile) -> SubsidyMatchResult:
        result = SubsidyMatchResult()
        for program in self._programs:
            outcome = match_program(program, profile)
            if outcome.eligible:
                result.matches.append(outcome)
            else:
                result.not_eligible.append(outcome)
        return result
