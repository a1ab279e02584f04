"""Rendering of normalized block trees to HTML and Markdown.

Both renderers are pure functions of the tree. Children are rendered first
and embedded in the parent's markup. Block types without a dedicated rule
fall back to a generic rendering of their text content.

HTML output escapes every text and attribute value. Markdown output is
emitted verbatim.
"""

import html
import textwrap

from notion_cms.models import BlockType, ContentBlock

DEFAULT_CALLOUT_ICON = "\U0001f4a1"

_HEADING_LEVELS = {
    BlockType.HEADING_1: 1,
    BlockType.HEADING_2: 2,
    BlockType.HEADING_3: 3,
}


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for use in HTML text or attribute values."""
    return html.escape(text or "", quote=True)


# =============================================================================
# HTML
# =============================================================================


def to_html(blocks: tuple[ContentBlock, ...] | list[ContentBlock]) -> str:
    """Render blocks to HTML, one sibling per line."""
    return "\n".join(block_to_html(block) for block in blocks)


def block_to_html(block: ContentBlock) -> str:
    """Render a single block (and its children) to HTML."""
    kind = block.kind
    meta = block.metadata
    text = escape_html(block.content)
    url = escape_html(meta.get("url", ""))
    children = to_html(block.children) if block.children else ""

    if kind == BlockType.PARAGRAPH:
        return f"<p>{text}</p>"

    if kind in _HEADING_LEVELS:
        level = _HEADING_LEVELS[kind]
        return f"<h{level}>{text}</h{level}>"

    if kind in (BlockType.BULLETED_LIST_ITEM, BlockType.NUMBERED_LIST_ITEM):
        # Only wrap when there is nested content
        tag = "ul" if kind == BlockType.BULLETED_LIST_ITEM else "ol"
        nested = f"<{tag}>{children}</{tag}>" if children else ""
        return f"<li>{text}{nested}</li>"

    if kind == BlockType.TO_DO:
        checked = " checked" if meta.get("checked") else ""
        return f'<div class="todo"><input type="checkbox"{checked} disabled />{text}</div>'

    if kind == BlockType.TOGGLE:
        return f"<details><summary>{text}</summary>{children}</details>"

    if kind == BlockType.CODE:
        language = escape_html(meta.get("language", ""))
        return f'<pre><code class="language-{language}">{text}</code></pre>'

    if kind == BlockType.QUOTE:
        return f"<blockquote>{text}</blockquote>"

    if kind == BlockType.CALLOUT:
        icon = escape_html(meta.get("icon", ""))
        body = f"{icon} {text}" if icon else text
        return f'<div class="callout">{body}</div>'

    if kind == BlockType.DIVIDER:
        return "<hr />"

    if kind == BlockType.IMAGE:
        caption = escape_html(block.content or meta.get("caption", ""))
        figcaption = f"<figcaption>{caption}</figcaption>" if caption else ""
        return f'<figure><img src="{url}" alt="{caption}" />{figcaption}</figure>'

    if kind == BlockType.VIDEO:
        return f'<video src="{url}" controls></video>'

    if kind == BlockType.EMBED:
        return f'<iframe src="{url}" frameborder="0"></iframe>'

    if kind == BlockType.BOOKMARK:
        label = text or escape_html(meta.get("caption", "")) or url
        return f'<a href="{url}" class="bookmark">{label}</a>'

    if kind == BlockType.FILE:
        label = text or escape_html(meta.get("caption", "")) or url
        return f'<a href="{url}" class="file">{label}</a>'

    if kind == BlockType.TABLE:
        return f"<table>{children}</table>"

    if kind == BlockType.TABLE_ROW:
        cells = "".join(f"<td>{escape_html(cell)}</td>" for cell in meta.get("cells", []))
        return f"<tr>{cells}</tr>"

    return f'<div class="block-{escape_html(block.type)}">{text}</div>'


# =============================================================================
# MARKDOWN
# =============================================================================


def to_markdown(blocks: tuple[ContentBlock, ...] | list[ContentBlock]) -> str:
    """Render blocks to Markdown, siblings separated by a blank line."""
    return "\n\n".join(block_to_markdown(block) for block in blocks)


def _nested_markdown(children: tuple[ContentBlock, ...] | None) -> str:
    """Render children one per line, indented by two spaces."""
    if not children:
        return ""
    rendered = "\n".join(block_to_markdown(child) for child in children)
    return textwrap.indent(rendered, "  ")


def block_to_markdown(block: ContentBlock) -> str:
    """Render a single block (and its children) to Markdown."""
    kind = block.kind
    meta = block.metadata
    text = block.content
    url = meta.get("url", "")

    if kind == BlockType.PARAGRAPH:
        return text

    if kind in _HEADING_LEVELS:
        return f"{'#' * _HEADING_LEVELS[kind]} {text}"

    if kind in (BlockType.BULLETED_LIST_ITEM, BlockType.NUMBERED_LIST_ITEM):
        marker = "-" if kind == BlockType.BULLETED_LIST_ITEM else "1."
        nested = _nested_markdown(block.children)
        return f"{marker} {text}\n{nested}" if nested else f"{marker} {text}"

    if kind == BlockType.TO_DO:
        checkbox = "[x]" if meta.get("checked") else "[ ]"
        return f"- {checkbox} {text}"

    if kind == BlockType.TOGGLE:
        return f"<details>\n<summary>{text}</summary>\n\n{_nested_markdown(block.children)}\n</details>"

    if kind == BlockType.CODE:
        return f"```{meta.get('language', '')}\n{text}\n```"

    if kind == BlockType.QUOTE:
        return f"> {text}"

    if kind == BlockType.CALLOUT:
        return f"> {meta.get('icon') or DEFAULT_CALLOUT_ICON} {text}"

    if kind == BlockType.DIVIDER:
        return "---"

    if kind == BlockType.IMAGE:
        return f"![{text or meta.get('caption') or 'image'}]({url})"

    if kind == BlockType.VIDEO:
        return f"[Video]({url})"

    if kind == BlockType.EMBED:
        return f"[Embed]({url})"

    if kind == BlockType.BOOKMARK:
        return f"[{text or meta.get('caption') or 'Link'}]({url})"

    if kind == BlockType.FILE:
        return f"[{text or meta.get('caption') or 'File'}]({url})"

    if kind == BlockType.TABLE:
        # Rows only, no header separator or column alignment
        return "\n".join(block_to_markdown(row) for row in block.children or ())

    if kind == BlockType.TABLE_ROW:
        return f"| {' | '.join(meta.get('cells', []))} |"

    return text
