from finchat.core.formatting import blocks_from_markdown
from finchat.types.content import (
    CalloutBlock,
    CodeBlock,
    DividerBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    MathBlock,
    ParagraphBlock,
    QuoteBlock,
    TableBlock,
)


def test_empty_input():
    assert blocks_from_markdown("") == []
    assert blocks_from_markdown("  \n\n ") == []
    assert blocks_from_markdown(None) == []


def test_mixed_reply():
    text = (
        "# Budget\n"
        "\n"
        "You spent **$200** on food\n"
        "this month.\n"
        "\n"
        "- Groceries\n"
        "- Takeout\n"
        "\n"
        "```python\n"
        "total = 200\n"
        "```\n"
        "---\n"
        "> Spend less than you earn."
    )

    blocks = blocks_from_markdown(text)

    assert [type(b) for b in blocks] == [
        HeadingBlock,
        ParagraphBlock,
        ListBlock,
        CodeBlock,
        DividerBlock,
        QuoteBlock,
    ]
    assert blocks[1].content == "You spent **$200** on food this month."
    assert blocks[2].metadata.items == ("Groceries", "Takeout")
    assert blocks[3].metadata.language == "python"
    assert blocks[3].metadata.code == "total = 200"
    assert blocks[5].content == "Spend less than you earn."


def test_heading_levels_clamp():
    blocks = blocks_from_markdown("## Two\n#### Four")
    assert [b.level for b in blocks] == [2, 3]


def test_ordered_and_todo_lists():
    blocks = blocks_from_markdown("1. Open account\n2. Deposit\n\n- [x] Pay rent\n- [ ] Save 10%")

    ordered, todo = blocks
    assert ordered.metadata.style == "ordered"
    assert ordered.metadata.items == ("Open account", "Deposit")
    assert todo.metadata.style == "todo"
    assert [(i.text, i.checked) for i in todo.metadata.todo_items] == [("Pay rent", True), ("Save 10%", False)]


def test_table():
    blocks = blocks_from_markdown("| Category | Amount |\n| --- | ---: |\n| Food | 200 |\n| Rent | 900 |")

    (table,) = blocks
    assert isinstance(table, TableBlock)
    assert table.metadata.headers == ("Category", "Amount")
    assert [[c.content for c in row] for row in table.metadata.rows] == [["Food", "200"], ["Rent", "900"]]


def test_pipe_line_without_separator_is_paragraph():
    blocks = blocks_from_markdown("| not a table |")
    assert isinstance(blocks[0], ParagraphBlock)


def test_callout():
    (callout,) = blocks_from_markdown("> [!WARNING] Network fees apply\n> Double-check the address.")
    assert isinstance(callout, CalloutBlock)
    assert callout.metadata.callout_type == "warning"
    assert callout.content == "Network fees apply Double-check the address."


def test_image_alone_on_line():
    (image,) = blocks_from_markdown("![Spending chart](https://example.com/chart.png)")
    assert isinstance(image, ImageBlock)
    assert image.metadata.url == "https://example.com/chart.png"
    assert image.plain_text() == "Spending chart"


def test_display_math():
    (math,) = blocks_from_markdown("$$\nA = P(1 + r)^n\n$$")
    assert isinstance(math, MathBlock)
    assert math.content == "A = P(1 + r)^n"


def test_unclosed_fence_takes_rest():
    (code,) = blocks_from_markdown("```\nx = 1\ny = 2")
    assert code.metadata.language == "text"
    assert code.metadata.code == "x = 1\ny = 2"
