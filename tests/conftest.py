"""
Shared HTML fixtures for the analyzer / fixer / extractor tests.
"""

import pytest


GOOD_TITLE = "Acme Widgets - Handmade Quality Widgets"  # 39 chars
GOOD_DESCRIPTION = "d" * 140


@pytest.fixture
def good_page_html():
    """A page that passes every SEO check."""
    body_words = "widget " * 320
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{GOOD_TITLE}</title>
<meta name="description" content="{GOOD_DESCRIPTION}">
<meta property="og:title" content="Acme">
<meta property="og:description" content="Acme widgets">
<meta property="og:image" content="https://example.com/og.png">
<meta name="twitter:card" content="summary">
<meta name="twitter:site" content="@acme">
<link rel="canonical" href="https://example.com/">
<link rel="icon" href="/favicon.ico">
</head>
<body>
<h1>Acme Widgets</h1>
<h2>Why choose us</h2>
<p>{body_words}</p>
<img src="widget.png" alt="A blue widget">
<a href="#contact">Contact the team</a>
<div id="contact">Reach us any time</div>
</body>
</html>"""


@pytest.fixture
def landing_page_html():
    """A typical generated landing page with semantic sections."""
    return """<!DOCTYPE html>
<html>
<head>
<style>
.hero { padding: 4rem; }
.unused-class { color: blue; }
nav a { color: white; }
footer, .site-footer { background: #111; }
</style>
</head>
<body>
<header><h1>Brand</h1></header>
<nav><a href="/">Home</a><a href="/about">About</a></nav>
<main>
<section class="hero"><h2>Big headline here</h2></section>
<section id="pricing-table"><p>Plans from $9 per month</p></section>
<section><p>What our customers say about us</p></section>
<section><form><input aria-label="email"></form></section>
</main>
<footer><p>Copyright 2024 Acme</p></footer>
</body>
</html>"""
