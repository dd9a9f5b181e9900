"""Utilities around constituency parse trees, represented as
:class:`nltk.Tree` objects in the Penn Treebank style."""
from typing import Dict, List, Tuple
from nltk import Tree

#: position of a node in a tree, as returned by
#: :meth:`nltk.Tree.treepositions`
TreePosition = Tuple[int, ...]

#: labels of clause nodes.  ``SBAR`` is not a clause: its ``S`` child is.
CLAUSE_LABELS = {"S", "SINV", "SQ", "SBARQ", "FRAG"}

NOUN_TAGS = {"NN", "NNS", "NNP", "NNPS", "NX"}
PROPER_NOUN_TAGS = {"NNP", "NNPS"}
PLURAL_NOUN_TAGS = {"NNS", "NNPS"}
PRONOUN_TAGS = {"PRP", "PRP$", "WP", "WP$", "WDT"}


def base_label(node: Tree) -> str:
    """Return the label of a node, without its function tags (``NP-SBJ``
    => ``NP``).  ``-NONE-``, ``-LRB-`` and such are kept as is.
    """
    label = node.label() if isinstance(node, Tree) else str(node)
    if label.startswith("-"):
        return label
    return label.split("-")[0].split("=")[0]


def is_preterminal(node) -> bool:
    return isinstance(node, Tree) and len(node) == 1 and isinstance(node[0], str)


def parse_tree(tree_or_str) -> Tree:
    """Parse a PTB bracketed string into a :class:`nltk.Tree`, or return
    the given tree as is.

    :raise ValueError: if the string is not a valid bracketed tree
    """
    if isinstance(tree_or_str, Tree):
        return tree_or_str
    return Tree.fromstring(tree_or_str)


def node_spans(tree: Tree) -> Dict[TreePosition, Tuple[int, int]]:
    """Compute the token span of every subtree of ``tree``.

    :return: a dict mapping each subtree position to a half-open
        ``(start, end)`` token span.
    """
    spans = {}

    def visit(node: Tree, position: TreePosition, start: int) -> int:
        end = start
        for child_i, child in enumerate(node):
            if isinstance(child, Tree):
                end = visit(child, position + (child_i,), end)
            else:
                end += 1
        spans[position] = (start, end)
        return end

    visit(tree, (), 0)
    return spans


def preterminal_positions(tree: Tree) -> List[TreePosition]:
    """Position of the preterminal node of each token, in token order"""
    return [tree.leaf_treeposition(i)[:-1] for i in range(len(tree.leaves()))]


def _head_child_index(node: Tree) -> int:
    """Choose the head child of a node, using Collins-style rules for
    noun phrases.

    Possessive markers are never chosen as head, so that the head of
    *Dan Ramage 's* is *Ramage*.
    """
    labels = [base_label(child) for child in node]
    for i in reversed(range(len(labels))):
        if labels[i] in NOUN_TAGS or labels[i] == "JJR":
            return i
    for i in range(len(labels)):
        if labels[i] == "NP":
            return i
    for i in reversed(range(len(labels))):
        if labels[i] in ("$", "ADJP", "PRN"):
            return i
    for i in reversed(range(len(labels))):
        if labels[i] == "CD":
            return i
    for i in reversed(range(len(labels))):
        if labels[i] in ("JJ", "JJS", "RB", "QP") or labels[i] in PRONOUN_TAGS:
            return i
    for i in reversed(range(len(labels))):
        if not labels[i] in ("POS", ",", ".", ":", "-RRB-", "-LRB-", "``", "''"):
            return i
    return len(labels) - 1


def head_position(tree: Tree, position: TreePosition) -> TreePosition:
    """Return the position of the preterminal heading the node at
    ``position``.  Trailing modifiers (PP, SBAR, appositives) are never
    chosen as head.
    """
    node = tree[position]
    while not is_preterminal(node):
        child_i = _head_child_index(node)
        position = position + (child_i,)
        node = tree[position]
    return position


def clause_position(tree: Tree, position: TreePosition) -> TreePosition:
    """Return the position of the minimal clause containing the node
    at ``position`` (the node itself excluded).  If there is no such
    clause, the root position ``()`` is returned.
    """
    for i in range(len(position) - 1, -1, -1):
        ancestor = position[:i]
        if base_label(tree[ancestor]) in CLAUSE_LABELS:
            return ancestor
    return ()


def is_argument_of(
    tree: Tree, position: TreePosition, clause: TreePosition
) -> bool:
    """Check if the node at ``position`` is an argument of ``clause``:
    either a direct child of the clause, or a direct child of one of
    the VPs of that clause.
    """
    if len(position) <= len(clause) or position[: len(clause)] != clause:
        return False
    parent = position[:-1]
    while len(parent) > len(clause):
        if base_label(tree[parent]) != "VP":
            return False
        parent = parent[:-1]
    return True
