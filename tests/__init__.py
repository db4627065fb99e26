"""
Change-Point MCMC — Test Suite
==============================

Test modules:
- test_config.py: Configuration sanitizer tests
- test_data_generator.py: Synthetic data tests
- test_model.py: Likelihood / prior / posterior tests
- test_metropolis.py: Metropolis stepper tests
- test_sampler.py: Sampling driver tests
- test_visualization.py: Bounds and plotting tests
"""

__version__ = '0.1.0'
