"""
Acme handler: four-step wizard with a progress bar.

Step 1 personal data, step 2 resume and qualifications, step 3 work
authorization and additional questions, step 4 review and submit.
"""

from ..errors import (
    RetryExhaustedError,
    StructuralMismatchError,
    SubmissionConfirmationError,
    UITimingError,
    error_message,
)
from ..form_fill.field_filler import fill_text, set_file, wait_for_required_selector
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
    ACME_STEP_TRANSITION_RETRY_PROFILE,
    ACME_SUBMIT_RETRY_PROFILE,
    ACME_TYPEAHEAD_RETRY_PROFILE,
    ACTION_PAUSE,
    PRE_SUBMIT_PAUSE,
    SINGLE_ATTEMPT_RETRY_PROFILE,
)
from .base import ATSHandler, HandlerContext
from .sections import StepSectionController, run_section
from .shared import (
    fill_optional_field_with_logs,
    has_markers,
    human_check_by_value,
    human_check_selector,
    human_select_value,
    read_confirmation,
    select_skills,
    wait_visible_with_retry,
)

REVIEW_STEP = 4


class AcmeHandler(ATSHandler):
    platform = PlatformId.ACME
    scope = "Acme"
    url_marker = "/acme.html"

    def section_controller(self) -> StepSectionController:
        return StepSectionController(self.scope, ACME_STEP_TRANSITION_RETRY_PROFILE)

    async def probe_dom(self, page) -> bool:
        return await has_markers(page, "#application-form", ".progress-bar")

    async def fill_form(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        steps = self.section_controller()
        await run_section(
            page, 1, self.scope, context, steps,
            lambda: self._fill_personal(page, profile, context),
            enter_log="Step 1: filling personal information fields.",
        )
        await run_section(
            page, 2, self.scope, context, steps,
            lambda: self._fill_qualifications(page, profile, context),
            enter_log="Step 2: uploading resume and selecting experience/education.",
        )
        await run_section(
            page, 3, self.scope, context, steps,
            lambda: self._fill_additional(page, profile, context),
            enter_log="Step 3: setting work authorization and additional questions.",
        )
        await steps.ensure_active(page, REVIEW_STEP, context)
        context.log_step(self.scope, "Review step is active.")

    async def _fill_personal(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        human = context.human
        await human.type_into(page, "#first-name", profile.first_name)
        await human.type_into(page, "#last-name", profile.last_name)
        await human.type_into(page, "#email", profile.email)
        await human.type_into(page, "#phone", profile.phone)
        await human.type_into(page, "#location", profile.location)
        await fill_optional_field_with_logs(
            page, "#linkedin", profile.linkedin, self.scope, "LinkedIn profile", context
        )
        await fill_optional_field_with_logs(
            page, "#portfolio", profile.portfolio, self.scope, "Portfolio/GitHub", context
        )

    async def _fill_qualifications(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        await set_file(page, "#resume", context.resume_path)
        await human_select_value(
            page, "#experience-level", map_experience_level(self.platform, profile.experience_level),
            context, ACTION_PAUSE,
        )
        await human_select_value(
            page, "#education", map_education(self.platform, profile.education), context, ACTION_PAUSE
        )
        await self._select_school(page, profile.school, context)

        async def check_skill(selector: str) -> bool:
            await human_check_selector(page, selector, context)
            return True

        await select_skills(
            page,
            profile.skills,
            self.scope,
            context,
            map_skill=lambda skill: map_skill(self.platform, skill),
            option_selector=lambda token: f'input[name="skills"][value="{token}"]',
            select_option=check_skill,
        )

    async def _select_school(self, page, school: str, context: HandlerContext) -> None:
        context.log_step(self.scope, "Selecting school using typeahead.")
        timeout_ms = context.options.timeouts.typeahead_ms

        async def attempt() -> None:
            await context.human.type_into(page, "#school", school)
            await wait_for_required_selector(
                page, "#school-dropdown li", timeout_ms, "Acme school dropdown did not show suggestions"
            )
            option = page.locator("#school-dropdown li", has_text=school)
            if await option.count() == 0:
                raise UITimingError(f'No Acme school suggestion matches "{school}" yet')
            await option.first.click()

        try:
            await with_optional_retry(
                attempt, context, ACME_TYPEAHEAD_RETRY_PROFILE, scope=self.scope, step="select school suggestion"
            )
        except (RetryExhaustedError, UITimingError) as e:
            raise StructuralMismatchError(f"[Acme] No school suggestion could be selected: {error_message(e)}") from e

    async def _fill_additional(self, page, profile: CandidateProfile, context: HandlerContext) -> None:
        timeouts = context.options.timeouts
        await human_check_by_value(
            page, "workAuth", "yes" if profile.work_authorized else "no", context, ACTION_PAUSE
        )

        if profile.work_authorized:
            context.log_step(self.scope, "Work authorization is yes, setting visa sponsorship response.")
            await wait_visible_with_retry(
                page,
                "#visa-sponsorship-group",
                timeouts.conditional_reveal_ms,
                "Acme visa sponsorship question did not appear",
                SINGLE_ATTEMPT_RETRY_PROFILE,
                self.scope,
                "wait for visa sponsorship question",
                context,
            )
            await human_check_by_value(
                page, "visaSponsorship", "yes" if profile.requires_visa else "no", context, ACTION_PAUSE
            )
        else:
            context.log_step(
                self.scope, "Work authorization is no, visa sponsorship follow-up is not shown, skipping."
            )

        await fill_text(page, "#start-date", profile.earliest_start_date)
        await fill_optional_field_with_logs(
            page, "#salary-expectation", profile.salary_expectation, self.scope, "Salary expectation", context
        )

        referral = map_referral_source(self.platform, profile.referral_source)
        context.log_step(self.scope, f'Referral source mapped to "{referral}".')
        await human_select_value(page, "#referral", referral, context, ACTION_PAUSE)
        if referral == referral_other_value(self.platform):
            context.log_step(self.scope, "Referral source is other, filling additional referral details.")
            await wait_visible_with_retry(
                page,
                "#referral-other",
                timeouts.conditional_reveal_ms,
                "Acme referral details field did not appear",
                SINGLE_ATTEMPT_RETRY_PROFILE,
                self.scope,
                "wait for referral details field",
                context,
            )
            await context.human.type_into(page, "#referral-other", profile.referral_source)

        await context.human.type_into(page, "#cover-letter", profile.cover_letter)

    async def submit(self, page, context: HandlerContext) -> str:
        await self.section_controller().ensure_active(page, REVIEW_STEP, context)
        context.log_step(self.scope, "Step 4: agreeing to terms and submitting application.")
        await human_check_selector(page, "#terms-agree", context, ACTION_PAUSE)

        async def attempt() -> None:
            await context.human.pause(PRE_SUBMIT_PAUSE.min_ms, PRE_SUBMIT_PAUSE.max_ms)
            await context.human.hover_then_click(page, "#submit-btn")
            await wait_for_required_selector(
                page,
                "#success-page",
                context.options.timeouts.confirmation_ms,
                "Acme success page did not appear after submit",
            )

        context.log_step(self.scope, "Waiting for success confirmation.")
        try:
            await with_optional_retry(
                attempt,
                context,
                ACME_SUBMIT_RETRY_PROFILE,
                scope=self.scope,
                step="submit application and wait for confirmation",
            )
        except (RetryExhaustedError, UITimingError) as e:
            raise SubmissionConfirmationError(f"[Acme] {error_message(e)}") from e

        confirmation = await read_confirmation(page, "#confirmation-id", self.scope)
        context.log_step(self.scope, f"Submission completed with confirmation ID {confirmation}.")
        return confirmation
