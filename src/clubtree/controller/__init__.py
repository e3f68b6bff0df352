"""
Tree Engine
===========
The per-pass computations of the member tree.

Why is this package needed?
---------------------------
1. Visibility: Which members are shown, given the expand/collapse flags.
2. Layout: Where each shown card goes and how big it is.
3. Reconciliation: How the previous frame turns into the new one.
4. Viewport: Which camera transform fits the shown cards on screen.

Note: These modules are pure Python/NumPy and should NOT import PySide6.
"""
