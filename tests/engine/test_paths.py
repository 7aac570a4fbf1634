"""Path selector construction and round-trip tests."""

from __future__ import annotations

from anchoring.engine.paths import build_selector

SAMPLE = (
    '<header class="site top"><nav><a href="/">Home</a><a href="/about">About</a></nav></header>'
    '<main id="content">'
    '<section><h2>Agenda</h2><ul><li>Budget</li><li class="done">Hiring</li><li>Travel</li></ul></section>'
    '<section><p id="a:b.c">Odd id</p><p id="1st">Digit id</p><p>Plain</p></section>'
    "</main>"
    '<footer><p class="small print">Fine print</p></footer>'
)


def test_id_becomes_path_root(make_document):
    document = make_document('<div><p id="intro">Hello</p></div>')
    node = document.soup.find("p")
    assert build_selector(document, node) == "#intro"


def test_walk_stops_at_id_bearing_ancestor(make_document):
    document = make_document('<div id="main"><section><p>Text</p></section></div>')
    node = document.soup.find("p")
    assert build_selector(document, node) == "#main > section > p"


def test_walk_reaches_root_element(make_document):
    document = make_document('<div class="card wide"><span>x</span></div>')
    node = document.soup.find("span")
    assert build_selector(document, node) == "html > body > div.card.wide > span"


def test_nth_of_type_only_when_siblings_share_tag(make_document):
    document = make_document("<ul><li>a</li><li>b</li></ul><ol><li>only</li></ol>")
    second, only = document.soup.find_all("li")[1:]
    assert build_selector(document, second) == "html > body > ul > li:nth-of-type(2)"
    assert build_selector(document, only) == "html > body > ol > li"


def test_special_characters_in_ids_are_escaped(make_document):
    document = make_document(SAMPLE)
    odd = document.soup.find(id="a:b.c")
    assert build_selector(document, odd) == "#a\\:b\\.c"
    assert document.select(build_selector(document, odd)) is odd


def test_prefixed_tag_names_are_escaped(make_document):
    document = make_document("<div><my:tag>Custom</my:tag></div>")
    node = document.soup.find("my:tag")

    selector = build_selector(document, node)

    assert selector == "html > body > div > my\\:tag"
    assert document.select(selector) is node


def test_every_element_round_trips(make_document):
    document = make_document(SAMPLE)
    for node in document.soup.find_all(True):
        selector = build_selector(document, node)
        assert document.select(selector) is node, selector
