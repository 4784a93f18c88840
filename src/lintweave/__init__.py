"""lintweave: hybrid multi-strategy rule analysis engine.

Runs a catalog of code-quality rules over a set of files. Each rule declares
one or more detection strategies (symbol-based AST analysis, heuristic
pattern matching); the engine picks which one runs per file, falls back when
the semantic engine cannot serve a file, deduplicates overlapping findings
and resolves the final severity from configuration.
"""

__version__ = "0.1.0"
