"""
Calc Studio - Scientific Calculator Engine

An input-driven calculator: a pure reducer that folds decoded key tokens
(digits, operators, scientific functions, memory and reset commands) into a
running display value, a chained pending operation, a memory register and a
bounded history of completed calculations.

The engine is wrapped by a command-line shell and an HTTP session API.
"""

__version__ = "1.0.0"
__author__ = "Calc Studio Team"
