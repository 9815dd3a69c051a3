"""
In-memory stand-ins for a Playwright page.

``FakePage`` keeps a tiny DOM of ``FakeNode`` objects and understands the
selector subset the handlers use: tag, ``#id``, ``.class``, ``[attr="v"]``,
``:not(.class)`` and the descendant combinator. Behaviour (typeahead results,
conditional reveals, step transitions) is attached through ``on_click``,
``on_input`` and ``on_change`` callbacks by the form builders below.

Missing elements raise Playwright's ``TimeoutError`` immediately instead of
waiting, so timing failures surface without slowing tests down.
"""

import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from atsfill_core.form_fill.field_filler import APPEND_VALUE_JS, SET_VALUE_JS

_TOKEN = re.compile(
    r'([a-zA-Z][\w-]*)'
    r'|#([\w-]+)'
    r'|\.([\w-]+)'
    r'|\[([\w-]+)="([^"]*)"\]'
    r'|:not\(\.([\w-]+)\)'
)


class Compound:
    def __init__(self, text: str):
        self.tag: Optional[str] = None
        self.id: Optional[str] = None
        self.classes: List[str] = []
        self.attrs: List[Tuple[str, str]] = []
        self.not_classes: List[str] = []
        pos = 0
        while pos < len(text):
            m = _TOKEN.match(text, pos)
            if not m:
                raise ValueError(f"Unsupported selector fragment: {text!r}")
            tag, id_, cls, attr, val, not_cls = m.groups()
            if tag:
                self.tag = tag.lower()
            elif id_:
                self.id = id_
            elif cls:
                self.classes.append(cls)
            elif attr:
                self.attrs.append((attr, val))
            elif not_cls:
                self.not_classes.append(not_cls)
            pos = m.end()

    def matches(self, node: "FakeNode") -> bool:
        if self.tag and node.tag != self.tag:
            return False
        if self.id and node.id != self.id:
            return False
        if any(c not in node.classes for c in self.classes):
            return False
        if any(c in node.classes for c in self.not_classes):
            return False
        return all(node.get_attribute(name) == value for name, value in self.attrs)


def parse_selector(selector: str) -> List[Compound]:
    return [Compound(part) for part in selector.split()]


Callback = Callable[["FakeNode"], None]


class FakeNode:
    def __init__(
        self,
        tag: str = "div",
        id: Optional[str] = None,
        classes: Iterable[str] = (),
        attrs: Optional[Dict[str, str]] = None,
        text: str = "",
        value: str = "",
        hidden: bool = False,
        options: Sequence[str] = (),
        parent: Optional["FakeNode"] = None,
    ):
        self.tag = tag.lower()
        self.id = id
        self.classes = set(classes)
        self.attrs = dict(attrs or {})
        self.text = text
        self.value = value
        self.hidden = hidden
        self.options = list(options)
        self.parent = parent
        self.checked = False
        self.files: Optional[str] = None
        self.on_click: Optional[Callback] = None
        self.on_input: Optional[Callback] = None
        self.on_change: Optional[Callback] = None

    def get_attribute(self, name: str) -> Optional[str]:
        if name == "class":
            return " ".join(sorted(self.classes)) if self.classes else None
        if name == "id":
            return self.id
        return self.attrs.get(name)

    @property
    def visible(self) -> bool:
        node: Optional[FakeNode] = self
        while node is not None:
            if node.hidden:
                return False
            node = node.parent
        return True

    def ancestors(self):
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def __repr__(self) -> str:
        return f"FakeNode({self.tag}#{self.id or ''}.{'.'.join(sorted(self.classes))})"


def _fire(callback: Optional[Callback], node: FakeNode) -> None:
    if callback is not None:
        callback(node)


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, has_text: Optional[str] = None, index: Optional[int] = None):
        self.page = page
        self.selector = selector
        self.has_text = has_text
        self.index = index

    def _all(self) -> List[FakeNode]:
        return self.page.query_all(self.selector, self.has_text)

    def _one(self) -> FakeNode:
        nodes = self._all()
        idx = self.index or 0
        if idx >= len(nodes):
            raise PlaywrightTimeoutError(f"Timeout exceeded: no element matches {self.selector!r}")
        return nodes[idx]

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, self.has_text, 0)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, self.has_text, index)

    async def count(self) -> int:
        total = len(self._all())
        if self.index is None:
            return total
        return 1 if self.index < total else 0

    async def fill(self, value: str) -> None:
        node = self._one()
        self.page.record("fill", self.selector, value)
        node.value = value
        _fire(node.on_input, node)

    async def press_sequentially(self, text: str, delay: float = 0) -> None:
        node = self._one()
        self.page.record("type", self.selector, text)
        self.page.key_delays.append(delay)
        node.value += text
        _fire(node.on_input, node)

    async def click(self) -> None:
        node = self._one()
        self.page.record("click", self.selector)
        _fire(node.on_click, node)

    async def hover(self) -> None:
        self._one()
        self.page.record("hover", self.selector)

    async def scroll_into_view_if_needed(self) -> None:
        self._one()
        self.page.record("scroll", self.selector)

    async def check(self) -> None:
        node = self._one()
        self.page.record("check", self.selector)
        if node.attrs.get("type") == "radio":
            for other in self.page.query_all(f'input[name="{node.attrs.get("name")}"]'):
                other.checked = False
        node.checked = True
        _fire(node.on_change, node)

    async def select_option(self, value: str) -> None:
        node = self._one()
        if node.options and value not in node.options:
            raise PlaywrightTimeoutError(f"Timeout exceeded: option {value!r} not found in {self.selector!r}")
        self.page.record("select", self.selector, value)
        node.value = value
        _fire(node.on_change, node)

    async def get_attribute(self, name: str) -> Optional[str]:
        return self._one().get_attribute(name)

    async def inner_text(self) -> str:
        return self._one().text

    async def set_input_files(self, path: str) -> None:
        node = self._one()
        self.page.record("upload", self.selector, path)
        node.files = path

    async def evaluate(self, script: str, arg=None):
        node = self._one()
        if script == APPEND_VALUE_JS:
            self.page.record("append", self.selector, arg)
            node.value += arg
            _fire(node.on_input, node)
            return None
        if script == SET_VALUE_JS:
            self.page.record("set_value", self.selector, arg)
            node.value = str(arg)
            _fire(node.on_input, node)
            _fire(node.on_change, node)
            return None
        raise NotImplementedError(f"FakeLocator cannot evaluate {script!r}")


class FakePage:
    def __init__(self, url: str = "about:blank"):
        self.url = url
        self.nodes: List[FakeNode] = []
        self.actions: List[Tuple] = []
        self.key_delays: List[float] = []
        self.waits: List[str] = []
        self.screenshots: List[str] = []
        self.fail_screenshot = False

    # DOM construction -------------------------------------------------

    def add(self, tag: str = "div", parent: Optional[FakeNode] = None, **kwargs) -> FakeNode:
        node = FakeNode(tag, parent=parent, **kwargs)
        self.nodes.append(node)
        return node

    def remove_children(self, parent: FakeNode) -> None:
        self.nodes = [n for n in self.nodes if parent not in n.ancestors()]

    def by_id(self, node_id: str) -> FakeNode:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def children(self, parent: FakeNode) -> List[FakeNode]:
        return [n for n in self.nodes if n.parent is parent]

    # Queries ----------------------------------------------------------

    def query_all(self, selector: str, has_text: Optional[str] = None) -> List[FakeNode]:
        chain = parse_selector(selector)
        found = [n for n in self.nodes if self._matches_chain(n, chain)]
        if has_text is not None:
            needle = has_text.casefold()
            found = [n for n in found if needle in n.text.casefold()]
        return found

    @staticmethod
    def _matches_chain(node: FakeNode, chain: List[Compound]) -> bool:
        if not chain[-1].matches(node):
            return False
        remaining = chain[:-1]
        for ancestor in node.ancestors():
            if not remaining:
                break
            if remaining[-1].matches(ancestor):
                remaining = remaining[:-1]
        return not remaining

    def locator(self, selector: str, has_text: Optional[str] = None) -> FakeLocator:
        return FakeLocator(self, selector, has_text)

    # Page API ---------------------------------------------------------

    def record(self, kind: str, selector: str, *args) -> None:
        self.actions.append((kind, selector) + args)

    def actions_of(self, kind: str) -> List[Tuple]:
        return [a for a in self.actions if a[0] == kind]

    def clicks(self) -> List[str]:
        return [a[1] for a in self.actions_of("click")]

    async def goto(self, url: str, wait_until: Optional[str] = None) -> None:
        self.url = url
        self.record("goto", url)

    async def wait_for_selector(self, selector: str, state: str = "visible", timeout: Optional[float] = None):
        self.waits.append(selector)
        nodes = [n for n in self.query_all(selector) if state != "visible" or n.visible]
        if not nodes:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector!r}")
        return nodes[0]

    async def screenshot(self, path: Optional[str] = None, full_page: bool = False) -> bytes:
        if self.fail_screenshot:
            raise RuntimeError("Target page, context or browser has been closed")
        self.screenshots.append(path)
        return b""


# ---------------------------------------------------------------------
# Form builders
# ---------------------------------------------------------------------

ACME_URL = "http://localhost:3939/acme.html"
GLOBEX_URL = "http://localhost:3939/globex.html"

ACME_SCHOOLS = (
    "Stanford University",
    "Massachusetts Institute of Technology",
    "University of California, Berkeley",
    "Carnegie Mellon University",
)
ACME_SKILLS = ("javascript", "typescript", "python", "react", "nodejs", "sql", "git", "docker", "aws")
ACME_REFERRALS = ("linkedin", "company-website", "job-board", "referral", "university", "other")

GLOBEX_SCHOOLS = (
    "Stanford University",
    "Stanford Graduate School of Business",
    "Stanford Online High School",
    "Massachusetts Institute of Technology",
)
GLOBEX_SKILLS = ("js", "ts", "py", "react", "node", "sql", "git", "docker", "aws")
GLOBEX_SOURCES = ("linkedin", "website", "board", "referral", "university", "other")


def build_acme_page(
    url: str = ACME_URL,
    stuck_steps: Iterable[int] = (),
    slow_steps: Optional[Dict[int, int]] = None,
    submit_failures: int = 0,
    schools: Sequence[str] = ACME_SCHOOLS,
    confirmation_id: str = "ACM-4F7Q2X",
    with_markers: bool = True,
) -> FakePage:
    """
    Four-step wizard.

    ``stuck_steps`` never become active; ``slow_steps`` maps a step to the
    number of continue clicks ignored before it activates; ``submit_failures``
    submit clicks are ignored before the success page shows.
    """
    page = FakePage(url)
    stuck = set(stuck_steps)
    slow = dict(slow_steps or {})
    state = {"submit_failures": submit_failures}

    form = page.add("form", id="application-form" if with_markers else "apply")
    if with_markers:
        page.add("div", parent=form, classes=["progress-bar"])

    steps: Dict[int, FakeNode] = {}
    for n in range(1, 5):
        steps[n] = page.add(
            "div", parent=form, classes=["form-step"] + (["active"] if n == 1 else []), attrs={"data-step": str(n)}
        )

    def make_continue(n: int) -> None:
        button = page.add("button", parent=steps[n], classes=["btn", "btn-primary"], text="Continue")

        def advance(_node):
            target = n + 1
            if target in stuck:
                return
            if slow.get(target, 0) > 0:
                slow[target] -= 1
                return
            steps[n].classes.discard("active")
            steps[target].classes.add("active")

        button.on_click = advance

    for n in range(1, 4):
        make_continue(n)

    step1, step2, step3, step4 = steps[1], steps[2], steps[3], steps[4]
    for field_id in ("first-name", "last-name", "email", "phone", "location", "linkedin", "portfolio"):
        page.add("input", parent=step1, id=field_id)

    page.add("input", parent=step2, id="resume", attrs={"type": "file"})
    page.add("select", parent=step2, id="experience-level", options=["0-1", "1-3", "3-5", "5-10", "10+"])
    page.add("select", parent=step2, id="education",
             options=["high-school", "associates", "bachelors", "masters", "phd"])
    school = page.add("input", parent=step2, id="school")
    dropdown = page.add("ul", parent=step2, id="school-dropdown", hidden=True)

    def choose_school(node: FakeNode) -> None:
        school.value = node.text
        dropdown.hidden = True

    def search_schools(node: FakeNode) -> None:
        page.remove_children(dropdown)
        query = node.value.casefold()
        if len(query) < 2:
            dropdown.hidden = True
            return
        for name in schools:
            if query in name.casefold():
                item = page.add("li", parent=dropdown, text=name)
                item.on_click = choose_school
        dropdown.hidden = not page.children(dropdown)

    school.on_input = search_schools

    for token in ACME_SKILLS:
        page.add("input", parent=step2, attrs={"type": "checkbox", "name": "skills", "value": token})

    visa_group = page.add("div", parent=step3, id="visa-sponsorship-group", hidden=True)

    def work_auth_changed(node: FakeNode) -> None:
        visa_group.hidden = node.attrs["value"] != "yes"

    for value in ("yes", "no"):
        radio = page.add("input", parent=step3, attrs={"type": "radio", "name": "workAuth", "value": value})
        radio.on_change = work_auth_changed
        page.add("input", parent=visa_group, attrs={"type": "radio", "name": "visaSponsorship", "value": value})

    page.add("input", parent=step3, id="start-date", attrs={"type": "date"})
    page.add("input", parent=step3, id="salary-expectation")
    referral = page.add("select", parent=step3, id="referral", options=list(ACME_REFERRALS))
    referral_other = page.add("input", parent=step3, id="referral-other", hidden=True)

    def referral_changed(node: FakeNode) -> None:
        referral_other.hidden = node.value != "other"

    referral.on_change = referral_changed
    page.add("textarea", parent=step3, id="cover-letter")

    terms = page.add("input", parent=step4, id="terms-agree", attrs={"type": "checkbox"})
    submit = page.add("button", parent=step4, id="submit-btn", classes=["btn-submit"], text="Submit")
    success = page.add("div", id="success-page", hidden=True)
    page.add("span", parent=success, id="confirmation-id", text=confirmation_id)

    def submit_clicked(_node):
        if not terms.checked:
            return
        if state["submit_failures"] > 0:
            state["submit_failures"] -= 1
            return
        form.hidden = True
        success.hidden = False

    submit.on_click = submit_clicked
    return page


def build_globex_page(
    url: str = GLOBEX_URL,
    stuck_sections: Iterable[str] = (),
    empty_school_queries: int = 1,
    schools: Sequence[str] = GLOBEX_SCHOOLS,
    submit_failures: int = 0,
    reference: str = "GX-20931",
    with_markers: bool = True,
) -> FakePage:
    """
    Single-page accordion.

    Section headers toggle ``open`` on click. The school typeahead shows only
    the "no results" placeholder for the first ``empty_school_queries``
    queries, then the matches in reverse order.
    """
    page = FakePage(url)
    stuck = set(stuck_sections)
    state = {"queries": 0, "submit_failures": submit_failures}

    form = page.add("form", id="globex-form" if with_markers else "apply")
    bodies: Dict[str, FakeNode] = {}
    for section_id in ("contact", "qualifications", "additional"):
        section = page.add(
            "div",
            parent=form,
            classes=["application-section"] if with_markers else ["panel"],
            attrs={"data-section": section_id},
        )
        header = page.add("div", parent=section, classes=["section-header"] + (["open"] if section_id == "contact" else []))

        def toggle(node: FakeNode, section_id=section_id) -> None:
            if section_id in stuck:
                return
            if "open" in node.classes:
                node.classes.discard("open")
            else:
                node.classes.add("open")

        header.on_click = toggle
        bodies[section_id] = page.add("div", parent=section, classes=["section-body"])

    contact, quals, additional = bodies["contact"], bodies["qualifications"], bodies["additional"]
    for field_id in ("g-fname", "g-lname", "g-email", "g-phone", "g-city", "g-linkedin", "g-website"):
        page.add("input", parent=contact, id=field_id)

    page.add("input", parent=quals, id="g-resume", attrs={"type": "file"})
    page.add("select", parent=quals, id="g-experience", options=["intern", "junior", "mid", "senior", "staff"])
    page.add("select", parent=quals, id="g-degree", options=["hs", "assoc", "bs", "ms", "phd"])
    school = page.add("input", parent=quals, id="g-school")
    results = page.add("ul", parent=quals, id="g-school-results")

    def choose_school(node: FakeNode) -> None:
        school.value = node.text
        results.classes.discard("open")

    def search_schools(node: FakeNode) -> None:
        page.remove_children(results)
        results.classes.discard("open")
        if node.value == "":
            state["queries"] += 1
            return
        if len(node.value) < 2:
            return
        if state["queries"] <= empty_school_queries:
            page.add("li", parent=results, classes=["typeahead-no-results"], text="No results")
        else:
            query = node.value.casefold()
            for name in reversed([s for s in schools if query in s.casefold()]):
                item = page.add("li", parent=results, text=name)
                item.on_click = choose_school
        results.classes.add("open")

    school.on_input = search_schools

    skills = page.add("div", parent=quals, id="g-skills")
    for token in GLOBEX_SKILLS:
        chip = page.add("div", parent=skills, classes=["chip"], attrs={"data-skill": token})

        def toggle_chip(node: FakeNode) -> None:
            if "selected" in node.classes:
                node.classes.discard("selected")
            else:
                node.classes.add("selected")

        chip.on_click = toggle_chip

    def make_toggle(node_id: str, on_flip: Optional[Callback] = None) -> FakeNode:
        toggle = page.add("div", parent=additional, id=node_id, classes=["toggle"], attrs={"data-value": "false"})

        def flip(node: FakeNode) -> None:
            node.attrs["data-value"] = "false" if node.attrs["data-value"] == "true" else "true"
            _fire(on_flip, node)

        toggle.on_click = flip
        return toggle

    visa_block = page.add("div", parent=additional, id="g-visa-block")

    def work_auth_flipped(node: FakeNode) -> None:
        if node.attrs["data-value"] == "true":
            visa_block.classes.add("visible")
        else:
            visa_block.classes.discard("visible")

    make_toggle("g-work-auth-toggle", work_auth_flipped)
    visa_toggle = make_toggle("g-visa-toggle")
    visa_toggle.parent = visa_block

    page.add("input", parent=additional, id="g-start-date", attrs={"type": "date"})
    page.add("input", parent=additional, id="g-salary", attrs={"type": "range"}, value="80000")
    source = page.add("select", parent=additional, id="g-source", options=list(GLOBEX_SOURCES))
    other_block = page.add("div", parent=additional, id="g-source-other-block")
    page.add("input", parent=other_block, id="g-source-other")

    def source_changed(node: FakeNode) -> None:
        if node.value == "other":
            other_block.classes.add("visible")
        else:
            other_block.classes.discard("visible")

    source.on_change = source_changed
    page.add("textarea", parent=additional, id="g-motivation")
    consent = page.add("input", parent=additional, id="g-consent", attrs={"type": "checkbox"})
    submit = page.add("button", parent=form, id="globex-submit", text="Submit Application")
    confirmation = page.add("div", id="globex-confirmation", hidden=True)
    page.add("span", parent=confirmation, id="globex-ref", text=f"  {reference}\n")

    def submit_clicked(_node):
        if not consent.checked:
            return
        if state["submit_failures"] > 0:
            state["submit_failures"] -= 1
            return
        form.hidden = True
        confirmation.hidden = False

    submit.on_click = submit_clicked
    return page
