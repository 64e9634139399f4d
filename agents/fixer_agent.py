# agents/fixer_agent.py

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from bs4 import BeautifulSoup

from models.analysis_models import SEOAnalysis
from services.html_parser import (
    ensure_head,
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
# 既定値
# ============================================================

DEFAULT_VIEWPORT = "width=device-width, initial-scale=1.0"
DEFAULT_LANG = "en"
DEFAULT_TITLE = "Untitled Page"
DEFAULT_OG_TITLE = "My Page"
DEFAULT_DESCRIPTION = "Page description"
DEFAULT_OG_IMAGE = "https://placehold.co/1200x630/png?text=Page+Preview"
FAVICON_HREF = (
    'data:image/svg+xml,<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
    '<text y=".9em" font-size="90">⚡</text></svg>'
)
MAX_DESCRIPTION_LEN = 160


def _first_paragraph_text(soup: BeautifulSoup) -> str:
    return text_of(soup.find("p"))[:MAX_DESCRIPTION_LEN]


# ============================================================
# 個別の修正
# ============================================================
# どの修正も「対象がまだ無いこと」を現在のツリーで確認してから挿入する。
# 先に実行された修正の結果も見えるので、同じ要素を二重に入れない。

def _add_viewport(soup: BeautifulSoup) -> None:
    if find_meta(soup, name="viewport") is None:
        meta = soup.new_tag("meta", attrs={"name": "viewport", "content": DEFAULT_VIEWPORT})
        ensure_head(soup).insert(0, meta)


def _add_charset(soup: BeautifulSoup) -> None:
    if not has_charset(soup):
        meta = soup.new_tag("meta", attrs={"charset": "UTF-8"})
        ensure_head(soup).insert(0, meta)


def _add_lang(soup: BeautifulSoup) -> None:
    root = soup.find("html")
    if root is not None and not root.get("lang"):
        root["lang"] = DEFAULT_LANG


def _add_alt_text(soup: BeautifulSoup) -> None:
    # 内容は推測せず、空の alt（装飾画像扱い）を付けるだけ
    for img in soup.find_all("img"):
        if not img.has_attr("alt"):
            img["alt"] = ""


def _add_meta_description(soup: BeautifulSoup) -> None:
    meta = find_meta(soup, name="description")
    if meta is not None and (meta.get("content") or "").strip():
        return

    content = _first_paragraph_text(soup) or DEFAULT_DESCRIPTION
    if meta is None:
        meta = soup.new_tag("meta", attrs={"name": "description", "content": content})
        ensure_head(soup).append(meta)
    else:
        # 空の description は中身だけ埋める
        meta["content"] = content


def _add_title(soup: BeautifulSoup) -> None:
    title = soup.find("title")
    if title is not None and text_of(title):
        return

    text = text_of(soup.find("h1")) or DEFAULT_TITLE
    if title is None:
        title = soup.new_tag("title")
        title.string = text
        ensure_head(soup).append(title)
    else:
        title.string = text


def _add_favicon(soup: BeautifulSoup) -> None:
    if not has_favicon(soup):
        link = soup.new_tag(
            "link",
            attrs={"rel": "icon", "type": "image/svg+xml", "href": FAVICON_HREF},
        )
        ensure_head(soup).append(link)


def _add_og_title(soup: BeautifulSoup) -> None:
    if find_meta(soup, prop="og:title") is None:
        content = text_of(soup.find("title")) or text_of(soup.find("h1")) or DEFAULT_OG_TITLE
        meta = soup.new_tag("meta", attrs={"property": "og:title", "content": content})
        ensure_head(soup).append(meta)


def _add_og_description(soup: BeautifulSoup) -> None:
    if find_meta(soup, prop="og:description") is None:
        desc_tag = find_meta(soup, name="description")
        content = (
            ((desc_tag.get("content") if desc_tag else "") or "").strip()
            or _first_paragraph_text(soup)
            or DEFAULT_DESCRIPTION
        )
        meta = soup.new_tag("meta", attrs={"property": "og:description", "content": content})
        ensure_head(soup).append(meta)


def _add_og_image(soup: BeautifulSoup) -> None:
    if find_meta(soup, prop="og:image") is None:
        first_img = soup.find("img")
        src = (first_img.get("src") if first_img else "") or ""
        meta = soup.new_tag("meta", attrs={"property": "og:image", "content": src or DEFAULT_OG_IMAGE})
        ensure_head(soup).append(meta)


def _fix_heading_hierarchy(soup: BeautifulSoup) -> None:
    """
    見出しを文書順に 1 回だけ走査し、直前のレベル +1 を超える見出しを
    h(current+1) に付け替える。属性と中身はそのまま（タグ名だけ変更）。
    最初の見出しはレベルの起点になるだけで書き換えない。
    """
    current_level = 0
    for heading in find_headings(soup):
        level = heading_level(heading)
        if current_level > 0 and level > current_level + 1:
            corrected = current_level + 1
            logger.debug("[fixer] rewrite <%s> -> <h%d>", heading.name, corrected)
            heading.name = f"h{corrected}"
            current_level = corrected
        else:
            current_level = level


# 修正 ID → 処理（固定の対応表）
FIX_HANDLERS: Mapping[str, Callable[[BeautifulSoup], None]] = MappingProxyType({
    "add-viewport": _add_viewport,
    "add-charset": _add_charset,
    "add-lang": _add_lang,
    "add-alt-text": _add_alt_text,
    "add-meta-description": _add_meta_description,
    "add-title": _add_title,
    "add-favicon": _add_favicon,
    "add-og-title": _add_og_title,
    "add-og-description": _add_og_description,
    "add-og-image": _add_og_image,
    "fix-heading-hierarchy": _fix_heading_hierarchy,
})


# ============================================================
# 公開関数
# ============================================================

def apply_fixes(html: Optional[str], analysis: SEOAnalysis) -> str:
    """
    analysis.issues のうち fix を持つものを元の順序で適用し、
    ドキュメント全体を文字列で返す。

    - 未知の fix ID は何もしない
    - 1 つの修正が失敗しても残りの修正は続行する
    - 修正対象と無関係なマークアップには触れない
    """
    soup = parse_document(html or "")

    applied = 0
    for issue in analysis.issues:
        if not issue.fix:
            continue

        handler = FIX_HANDLERS.get(issue.fix)
        if handler is None:
            logger.debug("[fixer] unknown fix id=%s, skipped", issue.fix)
            continue

        try:
            handler(soup)
            applied += 1
        except Exception as e:  # noqa: BLE001
            logger.warning("[fixer] fix failed id=%s error=%s", issue.fix, e)

    logger.info("[fixer] applied %d fix(es)", applied)
    # str(soup) だと meta の charset 値が出力エンコーディング（utf-8）に書き換わる
    return soup.decode(eventual_encoding=None)
