# agents/analyzer_agent.py

from __future__ import annotations

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from models.analysis_models import SEOAnalysis, SEOIssue, SEOMeta
from services.html_parser import (
    find_headings,
    find_meta,
    has_charset,
    has_favicon,
    heading_level,
    parse_document,
    text_of,
)

logger = logging.getLogger(__name__)

# ============================================================
# しきい値
# ============================================================

TITLE_MIN_LEN = 30
TITLE_MAX_LEN = 60
DESCRIPTION_MIN_LEN = 120
DESCRIPTION_MAX_LEN = 160

THIN_CONTENT_WORDS = 50
RECOMMENDED_WORDS = 300

MAX_ALT_LEN = 125
MAX_INLINE_STYLES = 15
MAX_EXTERNAL_SCRIPTS = 5

# 意味のないリンクテキスト
NON_DESCRIPTIVE_LINK = re.compile(r"^(click here|here|read more|link|more)$", re.IGNORECASE)


# ============================================================
# Meta Tags
# ============================================================

def _check_title(soup: BeautifulSoup, issues: List[SEOIssue]) -> str:
    """<title> の有無と長さ（trim 後の文字数）を確認し、テキストを返す。"""
    title_text = text_of(soup.find("title"))

    if not title_text:
        issues.append(SEOIssue(
            type="error",
            category="Meta Tags",
            message="Missing <title> tag. Search engines rely on the title to understand your page.",
            fix="add-title",
        ))
    elif len(title_text) < TITLE_MIN_LEN:
        issues.append(SEOIssue(
            type="warning",
            category="Meta Tags",
            message=f"Title is too short ({len(title_text)} chars). Aim for 30-60 characters.",
        ))
    elif len(title_text) > TITLE_MAX_LEN:
        issues.append(SEOIssue(
            type="warning",
            category="Meta Tags",
            message=f"Title is too long ({len(title_text)} chars). Aim for 30-60 characters.",
        ))
    return title_text


def _check_description(soup: BeautifulSoup, issues: List[SEOIssue]) -> str:
    meta_desc = find_meta(soup, name="description")
    desc = ((meta_desc.get("content") if meta_desc else "") or "").strip()

    if not desc:
        issues.append(SEOIssue(
            type="error",
            category="Meta Tags",
            message="Missing meta description. This is shown in search result snippets.",
            fix="add-meta-description",
        ))
    elif len(desc) < DESCRIPTION_MIN_LEN:
        issues.append(SEOIssue(
            type="warning",
            category="Meta Tags",
            message=f"Meta description is too short ({len(desc)} chars). Aim for 120-160 characters.",
        ))
    elif len(desc) > DESCRIPTION_MAX_LEN:
        issues.append(SEOIssue(
            type="warning",
            category="Meta Tags",
            message=f"Meta description is too long ({len(desc)} chars). Aim for 120-160 characters.",
        ))
    return desc


def _check_head_basics(soup: BeautifulSoup, issues: List[SEOIssue], meta: SEOMeta) -> None:
    """viewport / charset / lang の確認。"""
    meta.has_viewport = find_meta(soup, name="viewport") is not None
    if not meta.has_viewport:
        issues.append(SEOIssue(
            type="error",
            category="Meta Tags",
            message="Missing viewport meta tag. Page will not render correctly on mobile devices.",
            fix="add-viewport",
        ))

    meta.has_charset = has_charset(soup)
    if not meta.has_charset:
        issues.append(SEOIssue(
            type="warning",
            category="Meta Tags",
            message="Missing charset declaration. Specify UTF-8 to ensure correct character rendering.",
            fix="add-charset",
        ))

    root = soup.find("html")
    if not (root is not None and root.get("lang")):
        issues.append(SEOIssue(
            type="warning",
            category="Accessibility",
            message="Missing lang attribute on <html> tag. Screen readers need this to set pronunciation.",
            fix="add-lang",
        ))


def _check_social(soup: BeautifulSoup, issues: List[SEOIssue], meta: SEOMeta) -> None:
    """Open Graph / Twitter Card / canonical / favicon の確認。"""
    meta.has_og_title = find_meta(soup, prop="og:title") is not None
    meta.has_og_desc = find_meta(soup, prop="og:description") is not None
    meta.has_og_image = find_meta(soup, prop="og:image") is not None
    meta.has_og_tags = meta.has_og_title and meta.has_og_desc

    has_twitter_site = find_meta(soup, name="twitter:site") is not None
    meta.has_twitter_card = find_meta(soup, name="twitter:card") is not None

    if not meta.has_og_title:
        issues.append(SEOIssue(
            type="info",
            category="Meta Tags",
            message="Missing Open Graph title tag. Social media shares will lack a custom title.",
            fix="add-og-title",
        ))
    if not meta.has_og_desc:
        issues.append(SEOIssue(
            type="info",
            category="Meta Tags",
            message="Missing Open Graph description tag. Social media shares will lack a description.",
            fix="add-og-description",
        ))
    if not meta.has_og_image:
        issues.append(SEOIssue(
            type="info",
            category="Meta Tags",
            message="Missing Open Graph image tag. Social media shares will not display a preview image.",
            fix="add-og-image",
        ))

    # Twitter Card は情報提供のみ（自動修正なし）
    if not meta.has_twitter_card:
        issues.append(SEOIssue(
            type="info",
            category="Meta Tags",
            message="Missing Twitter Card meta tags. Twitter shares will not display a preview card.",
        ))
    elif not has_twitter_site:
        issues.append(SEOIssue(
            type="info",
            category="Meta Tags",
            message="Missing Twitter Site (@username) tag. Add twitter:site for better Twitter previews.",
        ))

    meta.has_canonical = soup.find("link", attrs={"rel": "canonical"}) is not None
    if not meta.has_canonical:
        issues.append(SEOIssue(
            type="info",
            category="Meta Tags",
            message="Missing canonical link. This helps prevent duplicate content issues in search engines.",
        ))

    meta.has_favicon = has_favicon(soup)
    if not meta.has_favicon:
        issues.append(SEOIssue(
            type="info",
            category="Meta Tags",
            message="Missing favicon link. Add a favicon for browser tab branding.",
            fix="add-favicon",
        ))


# ============================================================
# Content / Structure
# ============================================================

def _check_headings(soup: BeautifulSoup, issues: List[SEOIssue], meta: SEOMeta) -> None:
    """
    h1 の個数と見出し階層を確認する。
    直前の見出しから 2 段以上深くなったら階層スキップとみなす。
    """
    h1_count = len(soup.find_all("h1"))
    if h1_count == 0:
        issues.append(SEOIssue(
            type="error",
            category="Content",
            message="Missing <h1> heading. Every page should have exactly one H1.",
        ))
    elif h1_count > 1:
        issues.append(SEOIssue(
            type="warning",
            category="Content",
            message=f"Multiple <h1> tags found ({h1_count}). A page should have exactly one H1.",
        ))

    structure: List[str] = []
    prev_level = 0
    has_skip = False

    for heading in find_headings(soup):
        level = heading_level(heading)
        text = text_of(heading) or "(empty)"
        structure.append(f"{heading.name.upper()}: {text}")

        if prev_level > 0 and level > prev_level + 1:
            has_skip = True
        prev_level = level

    meta.heading_structure = structure

    if has_skip:
        issues.append(SEOIssue(
            type="warning",
            category="Structure",
            message="Heading hierarchy skips levels (e.g. H1 to H3). Use headings in sequential order.",
            fix="fix-heading-hierarchy",
        ))


def _check_word_count(soup: BeautifulSoup, issues: List[SEOIssue]) -> int:
    word_count = len(text_of(soup.body).split())

    if word_count < THIN_CONTENT_WORDS:
        issues.append(SEOIssue(
            type="warning",
            category="Content",
            message=(
                f"Page has very little text content ({word_count} words). "
                "Search engines prefer pages with substantial content."
            ),
        ))
    elif word_count < RECOMMENDED_WORDS:
        issues.append(SEOIssue(
            type="info",
            category="Content",
            message=(
                f"Page has {word_count} words. "
                "Consider adding more content for better search ranking (300+ recommended)."
            ),
        ))
    return word_count


# ============================================================
# Images / Links
# ============================================================

def _check_images(soup: BeautifulSoup, issues: List[SEOIssue], meta: SEOMeta) -> None:
    images = soup.find_all("img")
    missing_alt = [img for img in images if not img.has_attr("alt")]

    meta.image_count = len(images)
    meta.images_with_alt = len(images) - len(missing_alt)

    if missing_alt:
        issues.append(SEOIssue(
            type="error",
            category="Images",
            message=(
                f"{len(missing_alt)} image(s) missing alt attribute. "
                "Alt text is essential for accessibility and SEO."
            ),
            fix="add-alt-text",
        ))

    for img in images:
        alt = img.get("alt")
        if alt and len(alt) > MAX_ALT_LEN:
            issues.append(SEOIssue(
                type="info",
                category="Images",
                message=(
                    f"An image has overly long alt text ({len(alt)} chars). "
                    "Keep alt text concise (under 125 characters)."
                ),
            ))


def _check_links(soup: BeautifulSoup, issues: List[SEOIssue], meta: SEOMeta) -> None:
    """
    リンクテキストとページ内アンカーを確認する。
    1 リンクの検査で例外が出ても、そのリンクだけ飛ばして続行する。
    """
    links = soup.find_all("a")
    meta.link_count = len(links)

    for link in links:
        try:
            text = text_of(link)
            href = link.get("href") or ""

            if text and NON_DESCRIPTIVE_LINK.match(text):
                issues.append(SEOIssue(
                    type="warning",
                    category="Accessibility",
                    message=(
                        f'Link with non-descriptive text "{text}". '
                        "Use meaningful link text for accessibility and SEO."
                    ),
                ))

            if href.startswith("#") and len(href) > 1:
                target_id = href[1:]
                if soup.find(id=target_id) is None:
                    issues.append(SEOIssue(
                        type="warning",
                        category="Structure",
                        message=f'Internal link "{href}" points to a non-existent element.',
                    ))
        except Exception as e:  # noqa: BLE001
            logger.debug("[analyzer] skip link check: %s", e)


# ============================================================
# Performance / Accessibility
# ============================================================

def _check_performance(soup: BeautifulSoup, issues: List[SEOIssue]) -> None:
    inline_styles = len(soup.find_all(style=True))
    if inline_styles > MAX_INLINE_STYLES:
        issues.append(SEOIssue(
            type="info",
            category="Performance",
            message=(
                f"Found {inline_styles} elements with inline styles. "
                "Consider consolidating into a <style> block."
            ),
        ))

    scripts = len(soup.find_all("script", src=True))
    if scripts > MAX_EXTERNAL_SCRIPTS:
        issues.append(SEOIssue(
            type="info",
            category="Performance",
            message=(
                f"Found {scripts} external scripts. "
                "Consider bundling or deferring scripts to improve load time."
            ),
        ))


def _has_label(soup: BeautifulSoup, field) -> bool:
    if field.get("aria-label") or field.get("aria-labelledby"):
        return True
    field_id = field.get("id")
    if field_id and soup.find("label", attrs={"for": field_id}) is not None:
        return True
    return field.find_parent("label") is not None


def _check_form_labels(soup: BeautifulSoup, issues: List[SEOIssue]) -> None:
    missing = 0
    for field in soup.find_all(["input", "textarea", "select"]):
        try:
            if not _has_label(soup, field):
                missing += 1
        except Exception as e:  # noqa: BLE001
            logger.debug("[analyzer] skip form label check: %s", e)

    if missing > 0:
        issues.append(SEOIssue(
            type="warning",
            category="Accessibility",
            message=(
                f"{missing} form input(s) lack associated labels. "
                "Add label elements or aria-label attributes."
            ),
        ))


# ============================================================
# メインロジック
# ============================================================

def analyze_html(html: Optional[str]) -> SEOAnalysis:
    """
    HTML 文字列を解析して SEOAnalysis を返す。

    - 空文字（空白のみ含む）の場合はパースせずゼロ値の結果を返す
    - 壊れた HTML でも例外は出さない（ベストエフォートのパース）
    - score は issues から毎回計算する（キャッシュしない）
    """
    if not html or not html.strip():
        logger.info("[analyzer] empty html, return zero analysis")
        return SEOAnalysis.empty()

    soup = parse_document(html)
    issues: List[SEOIssue] = []
    meta = SEOMeta()

    # ----- Meta Tags -----
    title_text = _check_title(soup, issues)
    desc = _check_description(soup, issues)
    _check_head_basics(soup, issues, meta)
    _check_social(soup, issues, meta)

    # ----- Content / Structure -----
    _check_headings(soup, issues, meta)
    word_count = _check_word_count(soup, issues)

    # ----- Images / Links -----
    _check_images(soup, issues, meta)
    _check_links(soup, issues, meta)

    # ----- Performance / Accessibility -----
    _check_performance(soup, issues)
    _check_form_labels(soup, issues)

    meta.title = title_text or None
    meta.description = desc or None

    analysis = SEOAnalysis.from_issues(issues, meta)

    logger.info(
        "[analyzer] score=%d issues=%d fixable=%d words=%d",
        analysis.score,
        len(analysis.issues),
        analysis.fixable_count,
        word_count,
    )
    return analysis


def analyze(html: Optional[str]) -> SEOAnalysis:
    """analyze_html() のショートカット。"""
    return analyze_html(html)
