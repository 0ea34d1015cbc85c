"""
Order Selection Module
======================

Responsibility:
- Searches the number of hidden units with simulated annealing
  (SimulatedAnnealingOrder), committing the optimum to the model.
"""

from .simulated_annealing_order import SimulatedAnnealingOrder, boltzmann_probability

__all__ = ['SimulatedAnnealingOrder', 'boltzmann_probability']
