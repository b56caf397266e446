"""Lark grammar for the Python expression and binding-pattern sublanguage.

The same grammar text drives two lark instances: a lexer-only instance
that tokenizes whole comprehensions (it keeps every terminal, including
``FOR`` which no expression rule uses) and an LALR instance that parses
expression and pattern prefixes fed to it token by token.

Literals follow Python: decimal, hex, octal and binary integers, floats and
imaginary numbers, with underscores between digits; strings with an
optional ``r`` or ``u`` prefix and bytes with a ``b`` prefix. Adjacent strings (or
adjacent bytes) concatenate. Formatted strings and triple-quoted literals are
not part of the grammar.
"""

GRAMMAR = r"""
?test: or_test
     | or_test "if" or_test "else" test         -> ternary

?or_test: and_test ("or" and_test)*
?and_test: not_test ("and" not_test)*
?not_test: "not" not_test                       -> not_op
         | comparison

?comparison: expr (comp_op expr)*
!comp_op: "<" | ">" | "==" | ">=" | "<=" | "!=" | "in" | "not" "in" | "is" | "is" "not"

?expr: xor_expr
     | expr "|" xor_expr                        -> bit_or
?xor_expr: and_expr
         | xor_expr "^" and_expr                -> bit_xor
?and_expr: shift_expr
         | and_expr "&" shift_expr              -> bit_and
?shift_expr: arith_expr
           | shift_expr "<<" arith_expr         -> lshift
           | shift_expr ">>" arith_expr         -> rshift
?arith_expr: term
           | arith_expr "+" term                -> add
           | arith_expr "-" term                -> sub
?term: factor
     | term "*" factor                          -> mul
     | term "/" factor                          -> div
     | term "//" factor                         -> floordiv
     | term "%" factor                          -> mod
     | term "@" factor                          -> matmul
?factor: "+" factor                             -> uadd
       | "-" factor                             -> usub
       | "~" factor                             -> invert
       | power
?power: atom_expr
      | atom_expr "**" factor                   -> pow

?atom_expr: atom
          | atom_expr "(" [arguments] ")"       -> call
          | atom_expr "[" subscript "]"         -> getitem
          | atom_expr "." NAME                  -> getattr

?atom: NAME                                     -> name
     | NUMBER                                   -> number
     | STRING+                                  -> string
     | BYTES+                                   -> bytes_literal
     | "(" test ")"
     | "(" ")"                                  -> tuple_display
     | "(" test "," ")"                         -> tuple_display
     | "(" test ("," test)+ ","? ")"            -> tuple_display
     | "[" "]"                                  -> list_display
     | "[" test ("," test)* ","? "]"            -> list_display
     | "{" "}"                                  -> dict_display
     | "{" dict_item ("," dict_item)* ","? "}"  -> dict_display
     | "{" test ("," test)* ","? "}"            -> set_display

dict_item: test ":" test

arguments: argument ("," argument)* ","?
?argument: test
         | NAME "=" test                        -> keyword

?subscript: test
          | [test] ":" [test]                   -> slice

pattern: NAME                                   -> single_pattern
       | "(" NAME ")"                           -> single_pattern
       | NAME ","                               -> tuple_pattern
       | NAME ("," NAME)+ ","?                  -> tuple_pattern
       | "(" NAME "," ")"                       -> tuple_pattern
       | "(" NAME ("," NAME)+ ","? ")"          -> tuple_pattern

FOR: "for"
IN: "in"
IF: "if"
ELSE: "else"
AND: "and"
OR: "or"
NOT: "not"
IS: "is"

NAME: /[^\W\d]\w*/
NUMBER: /0[xX](?:_?[0-9a-fA-F])+|0[oO](?:_?[0-7])+|0[bB](?:_?[01])+|(?:\d(?:_?\d)*(?:\.(?:\d(?:_?\d)*)?)?|\.\d(?:_?\d)*)(?:[eE][+-]?\d(?:_?\d)*)?[jJ]?/
// String and bytes prefixes outrank NAME so r'..' is not lexed as r, '..'
STRING.2: /(?:[rR]|[uU])?(?:"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')/
BYTES.2: /(?:[bB][rR]?|[rR][bB])(?:"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')/

%ignore /[ \t\f\r\n]+/
"""

START_RULES = ["test", "or_test", "pattern"]

# Token types of the comprehension keywords
FOR = "FOR"
IN = "IN"
IF = "IF"
