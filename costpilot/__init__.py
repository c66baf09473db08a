"""
CostPilot - Source Package

A cost-of-living copilot: monthly budget in, stress assessment,
optimization recommendations and savings plans out.

DESIGN PRINCIPLES:
1. Numbers come from deterministic formulas, never from the model
2. The model only explains and personalizes those numbers
3. Every AI call has a deterministic fallback
4. Every step is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "CostPilot Team"
