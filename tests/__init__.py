"""
wrsample test suite.

Test Categories:
- Unit Tests: slots, priorities, partition scans, merges, samplers
- Adapter Tests: pandas DataFrame sampling
- Statistical Tests: Monte Carlo inclusion frequencies
"""
