"""Fingerprint builder tests."""

from __future__ import annotations

from anchoring.engine.fingerprint import create_fingerprint, create_selection_fingerprint, get_context
from anchoring.engine.hashing import hash_text
from anchoring.engine.types import BoundingBox, Selection

ARTICLE = (
    "<article>"
    "<h2>Intro heading</h2>"
    '<p class="lead" data-box="100.4,20.5,300.6,40.49">  Hello   brave world </p>'
    "<p>Closing words</p>"
    "</article>"
)


def test_whole_node_fingerprint(make_document, engine_config):
    document = make_document(ARTICLE, scroll=(5, 200))
    node = document.soup.find("p", class_="lead")

    anchor = create_fingerprint(document, node, engine_config)

    assert anchor.selector == "html > body > article > p.lead:nth-of-type(1)"
    assert anchor.tag_name == "p"
    assert anchor.class_name == "lead"
    assert anchor.text_snapshot == "Hello brave world"
    assert anchor.text_hash == hash_text("Hello brave world")
    assert anchor.context_before == "Intro heading"
    assert anchor.context_after == "Closing words"
    assert anchor.bounding_box == BoundingBox(top=300, left=26, width=301, height=40)
    assert anchor.element_key == f"p_{anchor.text_hash}_{hash_text(anchor.selector)}"
    assert not anchor.is_selection


def test_snapshot_is_capped_but_hash_covers_full_text(make_document, engine_config):
    text = " ".join(["word"] * 100)
    document = make_document(f"<p>{text}</p>")

    anchor = create_fingerprint(document, document.soup.find("p"), engine_config)

    assert len(anchor.text_snapshot) == 200
    assert anchor.text_snapshot == text[:200]
    assert anchor.text_hash == hash_text(text)


def test_context_is_normalized_and_capped(make_document):
    before = "a" * 30 + "\n\n" + "b" * 30
    document = make_document(f"<div><span>{before}</span><em>x</em><span>{'c' * 80}</span></div>")

    context = get_context(document, document.soup.find("em"), 50)

    assert context == ("a" * 19 + " " + "b" * 30, "c" * 50)


def test_context_walks_outward_until_long_enough(make_document):
    document = make_document("<div><b>one</b> <i>two</i><em>x</em><i>three</i></div>")

    before, after = get_context(document, document.soup.find("em"), 50)

    assert before == "one two"
    assert after == "three"


def test_root_element_has_no_context(make_document):
    document = make_document("<p>Only</p>")
    assert get_context(document, document.soup.html) == ("", "")


def test_no_layout_means_no_bounding_box(make_document, engine_config):
    document = make_document('<p data-box="1,2,3,4">Text</p>', layout=False)
    anchor = create_fingerprint(document, document.soup.find("p"), engine_config)
    assert anchor.bounding_box is None


def test_fingerprinting_does_not_mutate_the_tree(make_document, engine_config):
    document = make_document(ARTICLE)
    before = str(document.soup)

    for node in document.soup.find_all(True):
        create_fingerprint(document, node, engine_config)

    assert str(document.soup) == before


def test_selection_fingerprint(make_document, engine_config):
    document = make_document('<div><p id="note">The quick   brown fox</p></div>')
    leaf = document.soup.find("p").string

    anchor = create_selection_fingerprint(document, Selection(container=leaf, text="quick\n brown"), engine_config)

    assert anchor is not None
    assert anchor.selector == "#note"
    assert anchor.tag_name == "p"
    assert anchor.text_snapshot == "quick brown"
    assert anchor.text_hash == hash_text("quick brown")
    assert anchor.selection_start_offset == 4
    assert anchor.selection_length == 11
    assert anchor.bounding_box is None
    assert anchor.element_key == f"highlight_{anchor.text_hash}_{hash_text('#note')}"
    assert anchor.is_selection


def test_selection_snapshot_is_not_capped(make_document, engine_config):
    text = " ".join(["long"] * 80)
    document = make_document(f"<p>{text}</p>")

    anchor = create_selection_fingerprint(document, Selection(document.soup.find("p"), text), engine_config)

    assert anchor.text_snapshot == text
    assert anchor.selection_length == len(text)


def test_selection_beyond_element_text_has_negative_offset(make_document, engine_config):
    document = make_document("<p>The quick brown fox</p><p>jumps over</p>")
    node = document.soup.find("p")

    anchor = create_selection_fingerprint(document, Selection(node, "fox jumps"), engine_config)

    assert anchor.selection_start_offset == -1
    assert anchor.selection_length == 9


def test_empty_selections_produce_no_anchor(make_document, engine_config):
    document = make_document("<p>Text</p>")
    node = document.soup.find("p")

    assert create_selection_fingerprint(document, None, engine_config) is None
    assert create_selection_fingerprint(document, Selection(node, ""), engine_config) is None
    assert create_selection_fingerprint(document, Selection(node, " \n\t "), engine_config) is None


def test_script_and_style_siblings_add_no_context(make_document):
    document = make_document(
        "<div><style>p { color: red; }</style><b>lead</b><em>x</em><script>track();</script></div>"
    )

    assert get_context(document, document.soup.find("em")) == ("lead", "")
    assert document.text_content(document.soup.find("script")) == ""
