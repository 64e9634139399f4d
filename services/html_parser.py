# services/html_parser.py

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Doctype, Tag

from models.site_models import PageMetadata

logger = logging.getLogger(__name__)

# 見出しタグ（h1〜h6）
HEADING_PATTERN = re.compile(r"^h[1-6]$")

FAVICON_RELS = ("icon", "shortcut icon", "apple-touch-icon")

# 信頼できない HTML をプレビューする際に差し込む CSP
CSP_META = (
    '<meta http-equiv="Content-Security-Policy" '
    "content=\"default-src 'self' 'unsafe-inline' data: blob:; "
    "script-src 'none'; object-src 'none'; base-uri 'none';\">"
)


def parse_document(html: str) -> BeautifulSoup:
    """
    HTML 文字列を BeautifulSoup に変換する。

    - ブラウザの DOMParser と同様に、壊れたマークアップでも例外を出さず
      ベストエフォートでツリーを作る（lxml の HTML パーサ）。
    - <html> / <body> は lxml が補完する。<head> は中身がある場合のみ作られる。
    - 呼び出しごとに新しいツリーを返す（共有しない）。
    """
    return BeautifulSoup(html or "", "lxml")


def text_of(tag: Optional[Tag]) -> str:
    """textContent 相当（前後の空白は除去）。None なら空文字。"""
    if tag is None:
        return ""
    return tag.get_text().strip()


def rel_value(link: Tag) -> str:
    """rel は複数値属性としてリストで返るので、空白区切りの文字列に戻す。"""
    rel = link.get("rel")
    if isinstance(rel, (list, tuple)):
        return " ".join(rel)
    return rel or ""


def find_link_by_rel(soup: BeautifulSoup, rels: Iterable[str]) -> Optional[Tag]:
    """rel が rels のいずれかと一致する最初の <link> を返す。"""
    wanted = tuple(rels)
    for rel in wanted:
        for link in soup.find_all("link"):
            if rel_value(link) == rel:
                return link
    return None


def has_favicon(soup: BeautifulSoup) -> bool:
    return find_link_by_rel(soup, FAVICON_RELS) is not None


def find_meta(
    soup: BeautifulSoup,
    name: Optional[str] = None,
    prop: Optional[str] = None,
) -> Optional[Tag]:
    """meta[name=...] または meta[property=...] を探す。"""
    if name is not None:
        return soup.find("meta", attrs={"name": name})
    if prop is not None:
        return soup.find("meta", attrs={"property": prop})
    return None


def _is_content_type_meta(tag: Tag) -> bool:
    # http-equiv の値は大文字小文字を区別しない
    return tag.name == "meta" and (tag.get("http-equiv") or "").lower() == "content-type"


def has_charset(soup: BeautifulSoup) -> bool:
    """meta[charset] か、旧来の http-equiv=Content-Type があるか。"""
    if soup.find("meta", attrs={"charset": True}) is not None:
        return True
    return soup.find(_is_content_type_meta) is not None


def find_headings(soup: BeautifulSoup) -> list:
    """h1〜h6 を文書順で返す。"""
    return soup.find_all(HEADING_PATTERN)


def heading_level(tag: Tag) -> int:
    return int(tag.name[1])


def ensure_root(soup: BeautifulSoup) -> Tag:
    """<html> 要素を返す。無ければ作成して既存ノードをその中へ移す。"""
    root = soup.find("html")
    if root is not None:
        return root

    root = soup.new_tag("html")
    for node in list(soup.contents):
        if isinstance(node, Doctype):
            continue
        root.append(node.extract())
    soup.append(root)
    return root


def ensure_head(soup: BeautifulSoup) -> Tag:
    """
    <head> を返す。無ければ作成して <html> の先頭に差し込む。
    （body の中身には触れない）
    """
    head = soup.find("head")
    if head is not None:
        return head

    root = ensure_root(soup)
    head = soup.new_tag("head")
    root.insert(0, head)
    logger.debug("[html_parser] created missing <head>")
    return head


def extract_metadata(html: str) -> PageMetadata:
    """
    HTML からタイトル・description・favicon を取り出す。
    ライブラリ一覧のカード表示などで使う軽量版。
    """
    soup = parse_document(html)

    title_tag = soup.find("title")
    title = title_tag.get_text() if title_tag else ""

    desc_tag = soup.find("meta", attrs={"name": "description"})
    description = (desc_tag.get("content") if desc_tag else "") or ""

    icon = find_link_by_rel(soup, ("icon", "shortcut icon"))
    favicon = (icon.get("href") if icon else "") or ""

    return PageMetadata(
        title=title or "Untitled Document",
        description=description,
        favicon=favicon,
    )


def prepare_safe_html(html: str, is_trusted: bool) -> str:
    """
    プレビュー用 HTML を返す。
    信頼できない HTML には strict な CSP を差し込む
    （<head> の直後、<head> が無ければ先頭）。
    """
    if is_trusted:
        return html

    safe_html, count = re.subn(
        r"<head>",
        lambda m: m.group(0) + CSP_META,
        html,
        count=1,
        flags=re.IGNORECASE,
    )
    if count:
        return safe_html
    return f"{CSP_META}{html}"
