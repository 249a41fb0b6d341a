"""SyntaxTreeNode-to-ADF conversion for block and inline markdown nodes"""

from typing import Callable, Optional

from markdown_it.tree import SyntaxTreeNode

from docpub.core.models import AdfDocument, AdfMark, AdfNode, MarkType, text_node
from docpub.core.parse import parse_markdown


LIST_TYPE_MAP: dict[str, str] = {
    'bullet_list':  'bulletList',
    'ordered_list': 'orderedList',
}

INLINE_MARK_MAP: dict[str, MarkType] = {
    'strong':      'strong',
    'em':          'em',
    'code_inline': 'code',
}

BREAK_TYPES = {'softbreak', 'hardbreak'}


def _heading_level(node: SyntaxTreeNode) -> int | None:
    """Return heading level (1-6) from an hN tag, else None."""
    if node.tag and node.tag[0] == 'h' and node.tag[1:].isdigit():
        return int(node.tag[1:])
    return None


def plain_text(node: SyntaxTreeNode) -> str:
    """Concatenate the raw text beneath node, rendering line breaks as newlines."""
    if node.type in BREAK_TYPES:
        return '\n'
    if node.children:
        return ''.join(plain_text(c) for c in node.children)
    return node.content


def _inline_children(node: SyntaxTreeNode) -> list[AdfNode]:
    """Map the inline children of a paragraph-like block, dropping empty results."""
    nodes = []
    for inline in node.children:
        for child in inline.children:
            mapped = inline_to_adf(child)
            if mapped is not None:
                nodes.append(mapped)
    return nodes


def _block_children(node: SyntaxTreeNode) -> list[AdfNode]:
    return [m for m in (node_to_adf(c) for c in node.children) if m is not None]


def inline_to_adf(node: SyntaxTreeNode) -> Optional[AdfNode]:
    """Convert one inline node to an ADF text (or hardBreak) node; None when it carries no text."""
    if node.type == 'text':
        return text_node(node.content) if node.content else None
    if node.type == 'hardbreak':
        return AdfNode(type='hardBreak')
    if node.type in INLINE_MARK_MAP:
        text = plain_text(node)
        return text_node(text, AdfMark(type=INLINE_MARK_MAP[node.type])) if text else None
    if node.type == 'link':
        text = plain_text(node)
        mark = AdfMark(type='link', attrs={'href': node.attrs.get('href', '')})
        return text_node(text, mark) if text else None

    # Anything else keeps its text and loses its formatting.
    text = node.content or plain_text(node)
    return text_node(text) if text else None


def _heading(node: SyntaxTreeNode) -> AdfNode:
    text = plain_text(node)
    return AdfNode(
        type='heading',
        attrs={'level': _heading_level(node)},
        content=[text_node(text)] if text else [],
    )


def _paragraph(node: SyntaxTreeNode) -> AdfNode:
    return AdfNode(type='paragraph', content=_inline_children(node))


def _list(node: SyntaxTreeNode) -> AdfNode:
    items = [_list_item(c) for c in node.children if c.type == 'list_item']
    return AdfNode(type=LIST_TYPE_MAP[node.type], content=items)


def _list_item(node: SyntaxTreeNode) -> AdfNode:
    return AdfNode(type='listItem', content=_block_children(node))


def _code_block(node: SyntaxTreeNode) -> AdfNode:
    code = node.content.removesuffix('\n')
    language = node.info.strip() if node.type == 'fence' else ''
    return AdfNode(
        type='codeBlock',
        attrs={'language': language} if language else None,
        content=[text_node(code)] if code else [],
    )


def _blockquote(node: SyntaxTreeNode) -> AdfNode:
    return AdfNode(type='blockquote', content=_block_children(node))


def _rule(node: SyntaxTreeNode) -> AdfNode:
    return AdfNode(type='rule')


BLOCK_CONVERTERS: dict[str, Callable[[SyntaxTreeNode], AdfNode]] = {
    'heading':      _heading,
    'paragraph':    _paragraph,
    'bullet_list':  _list,
    'ordered_list': _list,
    'list_item':    _list_item,
    'fence':        _code_block,
    'code_block':   _code_block,
    'blockquote':   _blockquote,
    'hr':           _rule,
}


def node_to_adf(node: SyntaxTreeNode) -> Optional[AdfNode]:
    """Convert one block node to ADF; unsupported kinds (tables, raw HTML) return None."""
    converter = BLOCK_CONVERTERS.get(node.type)
    return converter(node) if converter else None


def tree_to_adf(root: SyntaxTreeNode) -> AdfDocument:
    """Map the top-level blocks of a parsed document to an AdfDocument."""
    return AdfDocument(content=_block_children(root))


def markdown_to_adf(text: str, preset: str = 'gfm-like') -> AdfDocument:
    """Parse markdown text and convert it to an AdfDocument."""
    return tree_to_adf(parse_markdown(text, preset))
