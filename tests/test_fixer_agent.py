"""Tests for the auto-fix applier."""

import pytest
from bs4 import BeautifulSoup

from agents import fixer_agent
from agents.analyzer_agent import analyze_html
from agents.fixer_agent import DEFAULT_OG_IMAGE, apply_fixes
from models.analysis_models import SEOAnalysis, SEOIssue


def _soup(html):
    return BeautifulSoup(html, "lxml")


def _analysis_with(*fix_ids):
    issues = [
        SEOIssue(type="info", category="Meta Tags", message=f"test {fix_id}", fix=fix_id)
        for fix_id in fix_ids
    ]
    return SEOAnalysis.from_issues(issues, analyze_html("").meta)


def _fix_ids(analysis):
    return [issue.fix for issue in analysis.issues if issue.fix]


class TestHeadFixes:
    def test_missing_head_is_created(self):
        html = "<html><body><p>Hello world</p></body></html>"
        fixed = apply_fixes(html, analyze_html(html))
        soup = _soup(fixed)

        assert soup.head is not None
        assert soup.head.find("meta", attrs={"name": "viewport"}) is not None
        assert soup.head.find("meta", attrs={"charset": "UTF-8"}) is not None
        assert soup.body.p.get_text() == "Hello world"

    def test_charset_and_viewport_are_prepended(self):
        html = "<html><head><title>Existing</title></head><body><p>x</p></body></html>"
        fixed = apply_fixes(html, _analysis_with("add-viewport", "add-charset"))
        head_children = _soup(fixed).head.find_all(True, recursive=False)

        # 後から prepend された charset が先頭
        assert head_children[0].get("charset") == "UTF-8"
        assert head_children[1].get("name") == "viewport"
        assert head_children[1].get("content") == "width=device-width, initial-scale=1.0"
        assert head_children[2].name == "title"

    def test_title_from_h1(self):
        html = "<h1>  Welcome Home  </h1>"
        soup = _soup(apply_fixes(html, _analysis_with("add-title")))
        assert soup.title.get_text() == "Welcome Home"

    def test_title_fallback(self):
        soup = _soup(apply_fixes("<p>no heading</p>", _analysis_with("add-title")))
        assert soup.title.get_text() == "Untitled Page"

    def test_blank_title_is_filled(self):
        html = "<title> </title><h1>Real Title</h1>"
        soup = _soup(apply_fixes(html, _analysis_with("add-title")))
        assert len(soup.find_all("title")) == 1
        assert soup.title.get_text() == "Real Title"

    def test_meta_description_from_first_paragraph(self):
        html = f"<p>{'a' * 200}</p><p>second</p>"
        soup = _soup(apply_fixes(html, _analysis_with("add-meta-description")))
        meta = soup.find("meta", attrs={"name": "description"})
        assert meta["content"] == "a" * 160

    def test_meta_description_fallback(self):
        soup = _soup(apply_fixes("<h1>x</h1>", _analysis_with("add-meta-description")))
        meta = soup.find("meta", attrs={"name": "description"})
        assert meta["content"] == "Page description"

    def test_favicon(self):
        soup = _soup(apply_fixes("<p>x</p>", _analysis_with("add-favicon")))
        link = soup.head.find("link")
        assert link["type"] == "image/svg+xml"
        assert link["href"].startswith("data:image/svg+xml,")

    def test_favicon_not_duplicated(self):
        html = '<link rel="apple-touch-icon" href="/a.png"><p>x</p>'
        soup = _soup(apply_fixes(html, _analysis_with("add-favicon")))
        assert len(soup.find_all("link")) == 1


class TestOpenGraphFixes:
    def test_og_title_sees_earlier_title_fix(self):
        html = "<h1>Launch Day</h1>"
        fixed = apply_fixes(html, _analysis_with("add-title", "add-og-title", "add-title"))
        soup = _soup(fixed)

        assert len(soup.find_all("title")) == 1
        og = soup.find("meta", attrs={"property": "og:title"})
        assert og["content"] == "Launch Day"

    def test_og_description_prefers_meta_description(self):
        html = '<meta name="description" content="  From meta  "><p>From paragraph</p>'
        soup = _soup(apply_fixes(html, _analysis_with("add-og-description")))
        og = soup.find("meta", attrs={"property": "og:description"})
        assert og["content"] == "From meta"

    def test_og_image(self):
        with_img = _soup(apply_fixes('<img src="/hero.jpg">', _analysis_with("add-og-image")))
        assert with_img.find("meta", attrs={"property": "og:image"})["content"] == "/hero.jpg"

        without_img = _soup(apply_fixes("<p>x</p>", _analysis_with("add-og-image")))
        assert without_img.find("meta", attrs={"property": "og:image"})["content"] == DEFAULT_OG_IMAGE


class TestBodyFixes:
    def test_lang(self):
        soup = _soup(apply_fixes("<p>x</p>", _analysis_with("add-lang")))
        assert soup.html["lang"] == "en"

    def test_existing_lang_kept(self):
        soup = _soup(apply_fixes('<html lang="fr"><body>x</body></html>', _analysis_with("add-lang")))
        assert soup.html["lang"] == "fr"

    def test_alt_text(self):
        html = '<img src="a.png"><img src="b.png" alt="Existing">'
        images = _soup(apply_fixes(html, _analysis_with("add-alt-text"))).find_all("img")
        assert images[0]["alt"] == ""
        assert images[1]["alt"] == "Existing"

    def test_heading_hierarchy(self):
        html = '<h1>A</h1><h3 class="lead">B <em>c</em></h3><h4>D</h4><h2>E</h2>'
        soup = _soup(apply_fixes(html, _analysis_with("fix-heading-hierarchy")))
        headings = soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])

        assert [h.name for h in headings] == ["h1", "h2", "h3", "h2"]
        assert headings[1]["class"] == ["lead"]
        assert headings[1].em.get_text() == "c"

    def test_first_heading_only_seeds_level(self):
        soup = _soup(apply_fixes("<h3>A</h3><h5>B</h5>", _analysis_with("fix-heading-hierarchy")))
        assert [h.name for h in soup.find_all(["h3", "h4", "h5"])] == ["h3", "h4"]


class TestDispatch:
    def test_unknown_and_missing_fix_ids_are_noops(self):
        html = "<html><body><p>Keep me</p></body></html>"
        analysis = SEOAnalysis.from_issues(
            [
                SEOIssue(type="info", category="Content", message="no fix"),
                SEOIssue(type="info", category="Content", message="unknown", fix="add-magic"),
            ],
            analyze_html("").meta,
        )
        fixed = apply_fixes(html, analysis)
        assert _soup(fixed).head is None
        assert "Keep me" in fixed

    def test_failing_fix_does_not_stop_others(self, monkeypatch):
        def boom(soup):
            raise RuntimeError("boom")

        handlers = dict(fixer_agent.FIX_HANDLERS)
        handlers["add-viewport"] = boom
        monkeypatch.setattr(fixer_agent, "FIX_HANDLERS", handlers)

        fixed = apply_fixes("<p>x</p>", _analysis_with("add-viewport", "add-lang"))
        soup = _soup(fixed)
        assert soup.find("meta", attrs={"name": "viewport"}) is None
        assert soup.html["lang"] == "en"

    def test_fix_table_is_read_only(self):
        with pytest.raises(TypeError):
            fixer_agent.FIX_HANDLERS["add-viewport"] = None

    def test_empty_document(self):
        fixed = apply_fixes("", _analysis_with("add-viewport", "add-lang"))
        soup = _soup(fixed)
        assert soup.head.find("meta", attrs={"name": "viewport"}) is not None


class TestIdempotence:
    def test_fixed_issues_do_not_reappear(self, landing_page_html):
        first = analyze_html(landing_page_html)
        assert _fix_ids(first)

        fixed = apply_fixes(landing_page_html, first)
        second = analyze_html(fixed)
        assert _fix_ids(second) == []
        assert second.score > first.score

        refixed = apply_fixes(fixed, second)
        assert analyze_html(refixed).model_dump() == second.model_dump()

    def test_bare_document(self):
        html = "<html><body><h1>Hi</h1><h3>Skipped</h3><img src='a.png'></body></html>"
        fixed = apply_fixes(html, analyze_html(html))
        assert _fix_ids(analyze_html(fixed)) == []

    def test_deterministic(self, landing_page_html):
        analysis = analyze_html(landing_page_html)
        assert apply_fixes(landing_page_html, analysis) == apply_fixes(landing_page_html, analysis)

    def test_satisfied_document_is_unchanged(self, good_page_html):
        analysis = analyze_html(good_page_html)
        assert analysis.issues == []

        once = apply_fixes(good_page_html, analysis)
        assert analyze_html(once).model_dump() == analysis.model_dump()


class TestSerialization:
    def test_existing_meta_charset_is_kept(self):
        html = '<html><head><meta charset="ISO-8859-1"></head><body><p>x</p></body></html>'
        fixed = apply_fixes(html, _analysis_with("add-lang"))

        assert 'charset="ISO-8859-1"' in fixed
        assert "utf-8" not in fixed.lower()

    def test_existing_content_type_charset_is_kept(self):
        html = (
            '<html><head><meta http-equiv="Content-Type" content="text/html; charset=Shift_JIS">'
            "</head><body><p>x</p></body></html>"
        )
        fixed = apply_fixes(html, _analysis_with("add-lang"))

        assert "charset=Shift_JIS" in fixed
        assert "utf-8" not in fixed.lower()

    def test_inserted_charset_is_upper_case(self):
        fixed = apply_fixes("<p>x</p>", _analysis_with("add-charset"))
        assert 'charset="UTF-8"' in fixed
