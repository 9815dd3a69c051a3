"""
Globex handler: single-page accordion with toggles, chips, a salary slider
and an asynchronous school typeahead whose results arrive late and unordered.
"""

import math
import re
from typing import Optional

from ..errors import (
    RetryExhaustedError,
    StructuralMismatchError,
    SubmissionConfirmationError,
    UITimingError,
    error_message,
)
from ..form_fill.field_filler import fill_text, set_file, set_value_with_events, wait_for_required_selector
from ..mappings import (
    PlatformId,
    map_education,
    map_experience_level,
    map_referral_source,
    map_skill,
    referral_other_value,
)
from ..profile import CandidateProfile
from ..retry import with_optional_retry
from ..retry_profiles import (
    ACTION_PAUSE,
    GLOBEX_SECTION_OPEN_RETRY_PROFILE,
    GLOBEX_SUBMIT_RETRY_PROFILE,
    GLOBEX_TYPEAHEAD_RETRY_PROFILE,
    PRE_SUBMIT_PAUSE,
    SINGLE_ATTEMPT_RETRY_PROFILE,
)
from .base import ATSHandler, HandlerContext
from .sections import AccordionSectionController, run_section
from .shared import (
    attribute_contains,
    fill_optional_field_with_logs,
    has_markers,
    human_click_with_optional_pause,
    human_select_value,
    human_toggle_state,
    read_confirmation,
    select_skills,
    wait_visible_with_retry,
)

SALARY_DEFAULT = 80000
SALARY_MIN = 30000
SALARY_MAX = 200000
SALARY_STEP = 5000

SCHOOL_QUERY_LENGTH = 8
SCHOOL_RESULTS_OPEN = "#g-school-results.open"
SCHOOL_SELECTABLE_RESULTS = "#g-school-results li:not(.typeahead-no-results)"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_leading_int(raw: Optional[str]) -> Optional[int]:
    match = _LEADING_INT.match(raw or "")
    return int(match.group(1)) if match else None


def normalize_salary(raw_salary: Optional[str]) -> str:
    """Parse, default, clamp to [min, max] and snap to the slider step."""
    parsed = parse_leading_int(raw_salary)
    base = SALARY_DEFAULT if parsed is None else parsed
    bounded = max(SALARY_MIN, min(SALARY_MAX, base))
    stepped = int(math.floor(bounded / SALARY_STEP + 0.5)) * SALARY_STEP
    return str(stepped)


def normalize_city(location: str) -> str:
    city = location.split(",")[0].strip()
    return city or location.strip()


class GlobexHandler(ATSHandler):
    platform = PlatformId.GLOBEX
    scope = "Globex"
    url_marker = "/globex.html"

    def section_controller(self) -> AccordionSectionController:
        return AccordionSectionController(self.scope, GLOBEX_SECTION_OPEN_RETRY_PROFILE)

    async def probe_dom(self, page) -> bool:
        return await has_markers(page, "#globex-form", ".application-section")

    async def fill_form(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        sections = self.section_controller()
        await run_section(
            page, "contact", self.scope, context, sections,
            lambda: self._fill_contact(page, profile, context),
            enter_log="Section contact: filling personal/contact fields.",
        )
        await run_section(
            page, "qualifications", self.scope, context, sections,
            lambda: self._fill_qualifications(page, profile, context),
            enter_log="Section qualifications: uploading resume and selecting qualification data.",
        )
        await run_section(
            page, "additional", self.scope, context, sections,
            lambda: self._fill_additional(page, profile, context),
            enter_log="Section additional: setting authorization, compensation, source, and motivation.",
        )

    async def _fill_contact(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        human = context.human
        await human.type_into(page, "#g-fname", profile.first_name)
        await human.type_into(page, "#g-lname", profile.last_name)
        await human.type_into(page, "#g-email", profile.email)
        await human.type_into(page, "#g-phone", profile.phone)
        await human.type_into(page, "#g-city", normalize_city(profile.location))
        await fill_optional_field_with_logs(
            page, "#g-linkedin", profile.linkedin, self.scope, "LinkedIn profile", context
        )
        await fill_optional_field_with_logs(
            page, "#g-website", profile.portfolio, self.scope, "Portfolio/GitHub", context
        )

    async def _fill_qualifications(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        await set_file(page, "#g-resume", context.resume_path)
        await human_select_value(
            page, "#g-experience", map_experience_level(self.platform, profile.experience_level),
            context, ACTION_PAUSE,
        )
        await human_select_value(
            page, "#g-degree", map_education(self.platform, profile.education), context, ACTION_PAUSE
        )
        await self._select_school(page, profile.school, context)

        await context.human.scroll_into_view(page, "#g-skills")

        async def click_chip(selector: str) -> bool:
            if not await attribute_contains(page, selector, "class", "selected"):
                await human_click_with_optional_pause(page, selector, context, ACTION_PAUSE)
            return True

        await select_skills(
            page,
            profile.skills,
            self.scope,
            context,
            map_skill=lambda skill: map_skill(self.platform, skill),
            option_selector=lambda token: f'#g-skills .chip[data-skill="{token}"]',
            select_option=click_chip,
        )

    async def _select_school(self, page, school: str, context: HandlerContext) -> None:
        """
        Query the typeahead and pick a result.

        Results arrive after a delay and in no stable order, possibly empty on
        the first try, so the whole query is re-issued under the typeahead
        policy. An exact case-insensitive match wins; otherwise the first
        result that is not the "no results" placeholder is taken.
        """
        context.log_step(self.scope, "Searching school with async typeahead.")
        timeout_ms = context.options.timeouts.typeahead_ms
        target = school.strip().casefold()

        async def attempt() -> str:
            await context.human.type_into(page, "#g-school", school[:SCHOOL_QUERY_LENGTH])
            await context.human.pause(ACTION_PAUSE.min_ms, ACTION_PAUSE.max_ms)
            await wait_for_required_selector(
                page, SCHOOL_RESULTS_OPEN, timeout_ms, "Globex school results dropdown did not open"
            )

            options = page.locator(SCHOOL_SELECTABLE_RESULTS)
            total = await options.count()
            if total == 0:
                raise UITimingError("No selectable school options found in Globex dropdown")

            for index in range(total):
                option = options.nth(index)
                text = (await option.inner_text()).strip()
                if text.casefold() == target:
                    context.log_step(self.scope, "Exact school match found in results.")
                    await option.click()
                    return text

            context.log_step(self.scope, "Exact school match not found, selecting first available result.")
            chosen = (await options.first.inner_text()).strip()
            await options.first.click()
            await context.human.pause(ACTION_PAUSE.min_ms, ACTION_PAUSE.max_ms)
            return chosen

        try:
            chosen = await with_optional_retry(
                attempt, context, GLOBEX_TYPEAHEAD_RETRY_PROFILE, scope=self.scope, step="select school suggestion"
            )
        except (RetryExhaustedError, UITimingError) as e:
            raise StructuralMismatchError(f"[Globex] No school suggestion could be selected: {error_message(e)}") from e
        context.log_step(self.scope, f'School set to "{chosen}".')

    async def _fill_additional(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        timeouts = context.options.timeouts
        await human_toggle_state(page, "#g-work-auth-toggle", profile.work_authorized, context, ACTION_PAUSE)

        if profile.work_authorized:
            context.log_step(self.scope, "Work authorization is true, evaluating visa toggle.")
            await wait_visible_with_retry(
                page,
                "#g-visa-block.visible",
                timeouts.conditional_reveal_ms,
                "Globex visa block did not become visible",
                SINGLE_ATTEMPT_RETRY_PROFILE,
                self.scope,
                "wait for visa block",
                context,
            )
            await human_toggle_state(page, "#g-visa-toggle", profile.requires_visa, context, ACTION_PAUSE)
        else:
            context.log_step(self.scope, "Work authorization is false, visa toggle section is not applicable.")

        await fill_text(page, "#g-start-date", profile.earliest_start_date)

        salary = normalize_salary(profile.salary_expectation)
        context.log_step(self.scope, f"Normalized salary for slider set to {salary}.")
        await context.human.scroll_into_view(page, "#g-salary")
        await set_value_with_events(page, "#g-salary", salary)

        source = map_referral_source(self.platform, profile.referral_source)
        context.log_step(self.scope, f'Referral source mapped to "{source}".')
        await human_select_value(page, "#g-source", source, context, ACTION_PAUSE)
        if source == referral_other_value(self.platform):
            context.log_step(self.scope, "Referral mapped to other, filling source details.")
            await wait_visible_with_retry(
                page,
                "#g-source-other-block.visible",
                timeouts.conditional_reveal_ms,
                "Globex source-other block did not become visible",
                SINGLE_ATTEMPT_RETRY_PROFILE,
                self.scope,
                "wait for source-other block",
                context,
            )
            await context.human.type_into(page, "#g-source-other", profile.referral_source)

        await context.human.type_into(page, "#g-motivation", profile.cover_letter)

    async def submit(self, page, context: HandlerContext) -> str:
        context.log_step(self.scope, "Checking consent and submitting application.")
        await page.locator("#g-consent").first.check()

        async def attempt() -> None:
            await context.human.scroll_into_view(page, "#globex-submit")
            await context.human.pause(PRE_SUBMIT_PAUSE.min_ms, PRE_SUBMIT_PAUSE.max_ms)
            await human_click_with_optional_pause(page, "#globex-submit", context)
            await wait_for_required_selector(
                page,
                "#globex-confirmation",
                context.options.timeouts.confirmation_ms,
                "Globex confirmation section did not appear after submit",
            )

        context.log_step(self.scope, "Waiting for confirmation section.")
        try:
            await with_optional_retry(
                attempt,
                context,
                GLOBEX_SUBMIT_RETRY_PROFILE,
                scope=self.scope,
                step="submit application and wait for confirmation",
            )
        except (RetryExhaustedError, UITimingError) as e:
            raise SubmissionConfirmationError(f"[Globex] {error_message(e)}") from e

        reference = await read_confirmation(page, "#globex-ref", self.scope)
        context.log_step(self.scope, f"Submission completed with reference {reference}.")
        return reference
