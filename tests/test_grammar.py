import pytest
from pydantic import ValidationError

from blocktransformer.grammar import BlockParser, parse_blocks, render_block, render_blocks
from blocktransformer.models import Block


PARAGRAPH = "<!-- wp:paragraph --><p>Hi</p><!-- /wp:paragraph -->"
GROUP = (
    '<!-- wp:group {"layout":{"type":"constrained"}} --><div class="wp-block-group">'
    "<!-- wp:paragraph --><p>a</p><!-- /wp:paragraph -->"
    "<!-- wp:image {\"id\":7} --><figure><img src=\"x.jpg\"/></figure><!-- /wp:image -->"
    "</div><!-- /wp:group -->"
)


def test_parse_single_paragraph():
    blocks = parse_blocks(PARAGRAPH)
    assert len(blocks) == 1
    block = blocks[0]
    assert block.name == "core/paragraph"
    assert block.attributes == {}
    assert block.inner_html == "<p>Hi</p>"
    assert block.inner_content == ["<p>Hi</p>"]
    assert not block.is_raw


def test_parse_namespaced_block_with_attributes():
    doc = '<!-- wp:my-plugin/box {"color":"red","n":2,"tags":["a","b"]} -->x<!-- /wp:my-plugin/box -->'
    block = parse_blocks(doc)[0]
    assert block.name == "my-plugin/box"
    assert block.attributes == {"color": "red", "n": 2, "tags": ["a", "b"]}


def test_text_between_blocks_becomes_freeform():
    blocks = parse_blocks("intro\n<!-- wp:separator /-->\noutro")
    assert [b.name for b in blocks] == [None, "core/separator", None]
    assert blocks[0].inner_html == "intro\n"
    assert blocks[2].inner_html == "\noutro"
    assert blocks[1].inner_content == []


def test_nested_blocks_keep_placeholders():
    group = parse_blocks(GROUP)[0]
    assert group.name == "core/group"
    assert [b.name for b in group.inner_blocks] == ["core/paragraph", "core/image"]
    assert group.inner_content == ['<div class="wp-block-group">', None, None, "</div>"]
    assert group.inner_html == '<div class="wp-block-group"></div>'
    assert group.inner_blocks[1].attributes == {"id": 7}


@pytest.mark.parametrize("doc", [
    PARAGRAPH,
    GROUP,
    '<!-- wp:heading {"level":2} --><h2>T</h2><!-- /wp:heading -->\n\n' + PARAGRAPH,
    "plain text with no blocks at all",
    "lead <!-- wp:separator /--> middle <!-- wp:spacer {\"height\":\"20px\"} /--> tail",
    "",
])
def test_render_reproduces_canonical_documents(doc):
    assert render_blocks(parse_blocks(doc)) == doc


def test_empty_document_has_no_blocks():
    assert parse_blocks("") == []


def test_unclosed_block_is_closed_at_end_of_input():
    blocks = parse_blocks("<!-- wp:paragraph --><p>a</p>")
    assert len(blocks) == 1
    assert blocks[0].name == "core/paragraph"
    assert blocks[0].inner_html == "<p>a</p>"


def test_stray_closer_keeps_rest_as_text():
    doc = "text<!-- /wp:paragraph -->more"
    blocks = parse_blocks(doc)
    assert len(blocks) == 1
    assert blocks[0].is_raw
    assert blocks[0].inner_html == doc


def test_invalid_attribute_json_is_ignored():
    blocks = parse_blocks('<!-- wp:paragraph {"a":} --><p>x</p><!-- /wp:paragraph -->')
    assert blocks[0].name == "core/paragraph"
    assert blocks[0].attributes == {}
    assert blocks[0].inner_html == "<p>x</p>"


def test_parser_instance_is_reusable():
    parser = BlockParser()
    assert len(parser.parse(PARAGRAPH)) == 1
    assert len(parser.parse(PARAGRAPH + PARAGRAPH)) == 2


def test_render_escapes_attribute_json():
    block = Block(name="core/html", attributes={"content": "<b>--&"}, inner_html="x", inner_content=["x"])
    rendered = render_block(block)
    assert rendered == '<!-- wp:html {"content":"\\u003cb\\u003e\\u002d\\u002d\\u0026"} -->x<!-- /wp:html -->'
    assert parse_blocks(rendered)[0].attributes == {"content": "<b>--&"}


def test_render_void_block_and_core_namespace():
    assert render_block(Block(name="core/separator")) == "<!-- wp:separator /-->"
    assert render_block(Block(name="acme/widget", attributes={"a": True})) == '<!-- wp:acme/widget {"a":true} /-->'


def test_raw_block_renders_verbatim():
    assert render_block(Block.raw("<p>raw</p>")) == "<p>raw</p>"


def test_block_rejects_non_json_attributes():
    with pytest.raises(ValidationError):
        Block(name="core/paragraph", attributes={"bad": object()})


def test_block_accepts_empty_list_attributes():
    assert Block(name="core/paragraph", attributes=[]).attributes == {}


def test_parse_with_offsets_reports_source_spans():
    doc = 'lead <!-- wp:core/paragraph {"a": 1} --><p>x</p><!-- /wp:core/paragraph --> mid <!-- wp:separator /--> tail'
    entries = BlockParser().parse_with_offsets(doc)

    assert [doc[start:end] for _, start, end in entries] == [
        "lead ",
        '<!-- wp:core/paragraph {"a": 1} --><p>x</p><!-- /wp:core/paragraph -->',
        " mid ",
        "<!-- wp:separator /-->",
        " tail",
    ]
    assert [block.name for block, _, _ in entries] == [None, "core/paragraph", None, "core/separator", None]


def test_parse_with_offsets_for_unclosed_blocks():
    doc = "<!-- wp:group --><div><!-- wp:paragraph --><p>a</p>"
    entries = BlockParser().parse_with_offsets(doc)

    assert [block.name for block, _, _ in entries] == [None, "core/paragraph", "core/group"]
    assert [(start, end) for _, start, end in entries] == [(17, 22), (22, len(doc)), (0, len(doc))]
