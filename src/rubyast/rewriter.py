"""Rewrites the raw Ripper tree into parser-gem shaped ``Node`` trees.

Every raw node is dispatched on its tag to a ``process_*`` handler from the
``handlers`` package. Scanner leaves keep their ``@`` prefix in the table.
Handlers receive the raw node and the ``Rewriter`` and recurse through
``Rewriter.process``.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

from .errors import InternalError
from .handlers import assignment, blocks, calls, conditionals, literals, loops, methods
from .handlers import operators, patterns, strings, structure
from .tree import Node, RawNode, Symbol, is_raw

Handler = Callable[[RawNode, "Rewriter"], Any]

NODE_DISPATCH: Dict[str, Handler] = {
    # program structure
    'program': structure.process_program,
    'stmts': structure.process_stmts,
    'void_stmt': structure.process_void_stmt,
    'comment': structure.process_comment,
    'module': structure.process_module,
    'class': structure.process_class,
    'sclass': structure.process_sclass,
    'const_ref': structure.process_const_ref,
    'const_path_ref': structure.process_const_path_ref,
    'const_path_field': structure.process_const_path_ref,
    'top_const_ref': structure.process_top_const_ref,
    'top_const_field': structure.process_top_const_ref,
    'var_ref': structure.process_var_ref,
    'var_field': structure.process_var_ref,
    'var_alias': structure.process_var_alias,
    'paren': structure.process_paren,
    'BEGIN': structure.process_BEGIN,
    'END': structure.process_END,
    'defined': structure.process_defined,
    'alias': structure.process_alias,
    'undef': structure.process_undef,
    # assignment
    'assign': assignment.process_assign,
    'massign': assignment.process_massign,
    'opassign': assignment.process_opassign,
    'mlhs': assignment.process_mlhs,
    'mlhs_add_star': assignment.process_mlhs_add_star,
    'mlhs_add_post': assignment.process_mlhs_add_post,
    'mlhs_paren': assignment.process_mlhs_paren,
    'mrhs': assignment.process_mrhs,
    'mrhs_new_from_args': assignment.process_mrhs_new_from_args,
    'mrhs_add_star': assignment.process_mrhs_add_star,
    'aref_field': assignment.process_aref_field,
    'field': assignment.process_field,
    # calls
    'call': calls.process_call,
    'command': calls.process_command,
    'command_call': calls.process_command_call,
    'vcall': calls.process_vcall,
    'fcall': calls.process_fcall,
    'method_add_arg': calls.process_method_add_arg,
    'arg_paren': calls.process_arg_paren,
    'args': calls.process_args,
    'args_add_block': calls.process_args_add_block,
    'args_add_star': calls.process_args_add_star,
    'args_forward': calls.process_args_forward,
    'bare_assoc_hash': calls.process_bare_assoc_hash,
    'super': calls.process_super,
    'zsuper': calls.process_zsuper,
    'aref': calls.process_aref,
    # blocks and exceptions
    'method_add_block': blocks.process_method_add_block,
    'brace_block': blocks.process_brace_block,
    'do_block': blocks.process_do_block,
    'lambda': blocks.process_lambda,
    'block_var': blocks.process_block_var,
    'params': blocks.process_params,
    'rest_param': blocks.process_rest_param,
    'kwrest_param': blocks.process_kwrest_param,
    'blockarg': blocks.process_blockarg,
    'nokw_param': blocks.process_nokw_param,
    'begin': blocks.process_begin,
    'bodystmt': blocks.process_bodystmt,
    'rescue_mod': blocks.process_rescue_mod,
    'ensure': blocks.process_ensure,
    'next': blocks.process_next,
    'break': blocks.process_break,
    'redo': blocks.process_redo,
    'retry': blocks.process_retry,
    # conditionals and patterns
    'if': conditionals.process_if,
    'elsif': conditionals.process_elsif,
    'unless': conditionals.process_unless,
    'if_mod': conditionals.process_if_mod,
    'unless_mod': conditionals.process_unless_mod,
    'else': conditionals.process_else,
    'case': conditionals.process_case,
    'aryptn': patterns.process_aryptn,
    'fndptn': patterns.process_fndptn,
    'hshptn': patterns.process_hshptn,
    # loops
    'while': loops.process_while,
    'until': loops.process_until,
    'while_mod': loops.process_while_mod,
    'until_mod': loops.process_until_mod,
    'for': loops.process_for,
    # methods
    'def': methods.process_def,
    'defs': methods.process_defs,
    'return': methods.process_return,
    'return0': methods.process_return0,
    'yield': methods.process_yield,
    'yield0': methods.process_yield0,
    # operators
    'binary': operators.process_binary,
    'unary': operators.process_unary,
    'dot2': operators.process_dot2,
    'dot3': operators.process_dot3,
    'ifop': operators.process_ifop,
    # literals
    'array': literals.process_array,
    'hash': literals.process_hash,
    'assoclist_from_args': literals.process_assoclist_from_args,
    'assoc_new': literals.process_assoc_new,
    'assoc_splat': literals.process_assoc_splat,
    # strings, symbols and regexps
    'string_literal': strings.process_string_literal,
    'string_content': strings.process_string_content,
    'word': strings.process_word,
    'string_embexpr': strings.process_string_embexpr,
    'string_dvar': strings.process_string_dvar,
    'string_concat': strings.process_string_concat,
    'xstring_literal': strings.process_xstring_literal,
    'xstring': strings.process_xstring,
    'regexp_literal': strings.process_regexp_literal,
    'regexp': strings.process_regexp,
    'symbol_literal': strings.process_symbol_literal,
    'symbol': strings.process_symbol,
    'dyna_symbol': strings.process_dyna_symbol,
    'words': strings.process_words,
    'qwords': strings.process_qwords,
    'qsymbols': strings.process_qsymbols,
    'symbols': strings.process_symbols,
    # scanner leaves
    '@ident': structure.process_at_ident,
    '@ivar': structure.process_at_ivar,
    '@gvar': structure.process_at_gvar,
    '@cvar': structure.process_at_cvar,
    '@op': structure.process_at_op,
    '@const': structure.process_at_const,
    '@label': structure.process_at_label,
    '@kw': structure.process_at_kw,
    '@backref': structure.process_at_backref,
    '@int': literals.process_at_int,
    '@float': literals.process_at_float,
    '@rational': literals.process_at_rational,
    '@imaginary': literals.process_at_imaginary,
    '@CHAR': literals.process_at_CHAR,
    '@tstring_content': strings.process_at_tstring_content,
}


class Rewriter:
    """Per-parse rewriting state plus the dispatching ``process`` method.

    ``in_method`` is true while a ``def`` body is processed and decides between
    ``cvasgn`` and ``cvdecl``. ``kwrest`` holds the ``**name`` parameters of
    the enclosing bodies, innermost last; a bare reference to one of them is
    a local variable read, not a method call. ``local_variables`` holds names
    bound by patterns and named captures in the current scope.
    """

    def __init__(self, filename: str = "(string)", numbered_params: bool = True):
        self.filename = filename
        self.numbered_params = numbered_params
        self.local_variables: Set[Symbol] = set()
        self.kwrest: List[Optional[Symbol]] = []
        self.in_method = False
        self._dispatch = dict(NODE_DISPATCH)

    def process(self, exp: Any) -> Any:
        if not exp:
            return None
        if not is_raw(exp):
            raise InternalError(f"expected a raw node, got {exp!r}")

        tag = exp[0]
        handler = self._dispatch.get(tag)
        if handler is None:
            raise InternalError(f"no handler for raw node {tag!r}")
        return handler(exp, self)

    def is_local(self, name: str) -> bool:
        return name in self.local_variables or name in self.kwrest

    @contextmanager
    def method_body(self, active: bool = True) -> Iterator[None]:
        """Open a new local scope, as ``def``, ``class`` and ``module`` do."""
        previous = self.in_method
        outer_locals = self.local_variables
        self.in_method = active
        self.local_variables = set()
        try:
            yield
        finally:
            self.in_method = previous
            self.local_variables = outer_locals

    @contextmanager
    def kwrest_scope(self, name: Optional[Symbol]) -> Iterator[None]:
        self.kwrest.append(name)
        try:
            yield
        finally:
            self.kwrest.pop()

    def rewrite(self, raw: RawNode) -> Optional[Node]:
        """Rewrite a whole program; ``None`` when it has no statements."""
        result = self.process(raw)
        if result is None or result.tag == "void_stmt":
            return None
        return result
