from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

from ..tree import Node, RawNode, raw_tag, s
from .helpers import argument_list, take, unwrap_void
from .patterns import handle_guarded_pattern

if TYPE_CHECKING:
    from ..rewriter import Rewriter


def process_if(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, truepart, falsepart = take(exp, 4)
    return s("if", handle_condition(rw, cond), _consequent(rw, truepart), _consequent(rw, falsepart))


process_elsif = process_if


def process_unless(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, truepart, falsepart = take(exp, 4)
    return s("if", handle_condition(rw, cond), _consequent(rw, falsepart), _consequent(rw, truepart))


def process_if_mod(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, truepart = take(exp, 3)
    return s("if", handle_condition(rw, cond), rw.process(truepart), None)


def process_unless_mod(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, truepart = take(exp, 3)
    return s("if", handle_condition(rw, cond), None, rw.process(truepart))


def process_else(exp: RawNode, rw: Rewriter) -> Optional[Node]:
    _, body = take(exp, 2)
    return unwrap_void(rw.process(body))


def _consequent(rw: Rewriter, exp: Any) -> Optional[Node]:
    if not exp:
        return None
    return unwrap_void(rw.process(exp))


def handle_condition(rw: Rewriter, cond: Any) -> Node:
    """Process a condition, turning bare regexps and ranges into their boolean forms."""
    return condition_form(rw.process(cond))


def condition_form(cond: Node) -> Node:
    match cond.tag:
        case "regexp":
            return s("match_current_line", cond)
        case "irange":
            return s("iflipflop", *cond.children)
        case "erange":
            return s("eflipflop", *cond.children)
    return cond


# ----------------------------------------------------------------------
# case / when / in
# ----------------------------------------------------------------------

def process_case(exp: RawNode, rw: Rewriter) -> Node:
    _, subject, clauses = take(exp, 3)
    subject = rw.process(subject)

    match raw_tag(clauses):
        case "in":
            # `expr in pattern` arrives as a case whose only clause has no body
            if clauses[2] is None and clauses[3] is None:
                pattern, _guard = handle_guarded_pattern(rw, clauses[1])
                return s("match_pattern_p", subject, pattern)
            return s("case_match", subject, *_in_clauses(rw, clauses))
        case "right_assign":
            pattern, _guard = handle_guarded_pattern(rw, clauses[1])
            return s("match_pattern", subject, pattern)
    return s("case", subject, *_when_clauses(rw, clauses))


def _when_clauses(rw: Rewriter, clause: Any) -> List[Optional[Node]]:
    clauses: List[Optional[Node]] = []
    while raw_tag(clause) == "when":
        _, values, stmts, clause = take(clause, 4)
        values = argument_list(rw, values)
        clauses.append(s("when", *values, unwrap_void(rw.process(stmts))))
    clauses.append(_consequent(rw, clause))
    return clauses


def _in_clauses(rw: Rewriter, clause: Any) -> List[Optional[Node]]:
    clauses: List[Optional[Node]] = []
    while raw_tag(clause) == "in":
        _, raw_pattern, stmts, clause = take(clause, 4)
        pattern, guard = handle_guarded_pattern(rw, raw_pattern)
        clauses.append(s("in_pattern", pattern, guard, unwrap_void(rw.process(stmts))))
    clauses.append(_consequent(rw, clause))
    return clauses
