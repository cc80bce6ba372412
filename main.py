"""
Graphly: scatter, line and function charts.

Regression trendlines
---------------------
Linear         y = s·x + i          ordinary least squares
Quadratic      y = a·x² + b·x + c   3×3 normal equations, Cramer's rule
Exponential    y = a·e^(b·x)        linear fit on (x, ln y), y > 0
Power          y = a·x^b            linear fit on (ln x, ln y), x > 0, y > 0
Logarithmic    y = a + b·ln(x)      linear fit on (ln x, y), x > 0

Navigation: wheel zooms (Ctrl/Cmd keeps X, Shift keeps Y), drag pans,
two-finger pinch zooms.  Set GRAPHLY_LOG_LEVEL=DEBUG for diagnostics.
"""

from graphly.app import main

if __name__ == "__main__":
    main()
