"""End-to-end and edge-case tests for the Acme wizard handler"""

import pytest

pytestmark = pytest.mark.asyncio

from atsfill_core.errors import (
    SectionActivationError,
    StructuralMismatchError,
    SubmissionConfirmationError,
)
from atsfill_core.handlers import AcmeHandler, GlobexHandler, detect_handler
from atsfill_core.profile import SAMPLE_PROFILE
from conftest import make_context
from fakes import ACME_URL, build_acme_page


async def apply(page, profile=SAMPLE_PROFILE, context=None):
    handler = AcmeHandler()
    await handler.fill_form(page, profile, context)
    return await handler.submit(page, context)


def checked_values(page, name):
    return [n.attrs["value"] for n in page.query_all(f'input[name="{name}"]') if n.checked]


class TestDetection:

    async def test_url_marker(self):
        assert await AcmeHandler().matches(ACME_URL, build_acme_page())

    async def test_dom_probe_without_marker(self):
        page = build_acme_page(url="http://jobs.example.com/apply?id=7")
        assert await detect_handler(page.url, page) is not None
        assert isinstance(await detect_handler(page.url, page), AcmeHandler)

    async def test_globex_does_not_claim_acme(self):
        assert not await GlobexHandler().matches(ACME_URL, build_acme_page())

    async def test_unknown_page(self):
        page = build_acme_page(url="http://jobs.example.com/apply", with_markers=False)
        assert await detect_handler(page.url, page) is None


class TestEndToEnd:

    async def test_sample_profile_submits(self, context, recorder):
        page = build_acme_page()
        profile = SAMPLE_PROFILE.replace(skills=["javascript", "fortran"])

        confirmation = await apply(page, profile, context)

        assert confirmation.startswith("ACM-")
        assert page.by_id("first-name").value == "Jane"
        assert page.by_id("location").value == "San Francisco, CA"
        assert page.by_id("linkedin").value == profile.linkedin
        assert page.by_id("resume").files == "fixtures/sample-resume.pdf"
        assert page.by_id("experience-level").value == "0-1"
        assert page.by_id("education").value == "bachelors"
        assert page.by_id("school").value == "Stanford University"
        assert checked_values(page, "skills") == ["javascript"]
        assert checked_values(page, "workAuth") == ["yes"]
        assert checked_values(page, "visaSponsorship") == ["no"]
        assert page.by_id("start-date").value == profile.earliest_start_date
        assert page.by_id("salary-expectation").value == "85000"
        assert page.by_id("referral").value == "linkedin"
        assert page.by_id("cover-letter").value == profile.cover_letter
        assert page.by_id("terms-agree").checked

        assert recorder.contains('[Acme] Skill "fortran" has no mapping for Acme, skipping.')
        assert recorder.contains("[Acme] Selected 1 matching skills.")
        assert recorder.contains(f"[Acme] Submission completed with confirmation ID {confirmation}.")

    async def test_steps_advance_in_order(self, context):
        page = build_acme_page()
        await apply(page, SAMPLE_PROFILE, context)

        continues = [c for c in page.clicks() if "btn-primary" in c]
        assert continues == [
            '.form-step[data-step="1"] .btn-primary',
            '.form-step[data-step="2"] .btn-primary',
            '.form-step[data-step="3"] .btn-primary',
        ]

    async def test_long_cover_letter_is_partially_typed(self, context):
        page = build_acme_page()
        await apply(page, SAMPLE_PROFILE, context)

        typed = "".join(a[2] for a in page.actions_of("type") if a[1] == "#cover-letter")
        appended = [a for a in page.actions_of("append") if a[1] == "#cover-letter"]
        assert typed == SAMPLE_PROFILE.cover_letter[:12]
        assert len(appended) == 1


class TestConditionalFields:

    async def test_unauthorized_skips_visa_question(self, context, recorder):
        page = build_acme_page()
        profile = SAMPLE_PROFILE.replace(work_authorized=False)

        await apply(page, profile, context)

        assert checked_values(page, "workAuth") == ["no"]
        assert checked_values(page, "visaSponsorship") == []
        assert "#visa-sponsorship-group" not in page.waits
        assert recorder.contains("Work authorization is no, visa sponsorship follow-up is not shown, skipping.")

    async def test_unknown_referral_fills_other_details(self, context, recorder):
        page = build_acme_page()
        profile = SAMPLE_PROFILE.replace(referral_source="Hacker News thread")

        await apply(page, profile, context)

        assert page.by_id("referral").value == "other"
        assert page.by_id("referral-other").value == "Hacker News thread"
        assert recorder.contains("[Acme] Referral source is other, filling additional referral details.")

    async def test_missing_optionals_are_skipped(self, context, recorder):
        page = build_acme_page()
        profile = SAMPLE_PROFILE.replace(linkedin=None, portfolio=None, salary_expectation=None)

        await apply(page, profile, context)

        assert page.by_id("linkedin").value == ""
        assert page.by_id("salary-expectation").value == ""
        assert recorder.contains("[Acme] LinkedIn profile not provided, skipping optional field.")
        assert recorder.contains("[Acme] Salary expectation not provided, skipping optional field.")


class TestFailures:

    async def test_unknown_school_is_structural(self, context, recorder):
        page = build_acme_page()
        profile = SAMPLE_PROFILE.replace(school="Hogwarts School of Witchcraft")

        with pytest.raises(StructuralMismatchError) as exc_info:
            await AcmeHandler().fill_form(page, profile, context)

        assert "No school suggestion" in str(exc_info.value)
        assert recorder.contains('Retrying step "select school suggestion"')

    async def test_stuck_step_aborts_fill(self, context):
        page = build_acme_page(stuck_steps=[3])

        with pytest.raises(SectionActivationError):
            await AcmeHandler().fill_form(page, SAMPLE_PROFILE, context)

        assert page.by_id("cover-letter").value == ""

    async def test_submit_retried_once(self, context, recorder):
        page = build_acme_page(submit_failures=1)

        confirmation = await apply(page, SAMPLE_PROFILE, context)

        assert confirmation == "ACM-4F7Q2X"
        assert page.clicks().count("#submit-btn") == 2
        assert recorder.contains('Retrying step "submit application and wait for confirmation" after failed attempt 1/2')

    async def test_submit_never_confirmed(self, context):
        page = build_acme_page(submit_failures=5)

        with pytest.raises(SubmissionConfirmationError):
            await apply(page, SAMPLE_PROFILE, context)

        assert page.clicks().count("#submit-btn") == 2

    async def test_submit_without_retries(self, recorder):
        context = make_context(recorder, enable_retries=False)
        page = build_acme_page(submit_failures=1)

        with pytest.raises(SubmissionConfirmationError):
            await apply(page, SAMPLE_PROFILE, context)

        assert page.clicks().count("#submit-btn") == 1
