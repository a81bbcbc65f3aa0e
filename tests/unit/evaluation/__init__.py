"""
Unit tests for extraction accuracy and quality evaluation.

This package contains tests for:
- Ground truth matching (test_ground_truth.py)
- Metrics calculation and aggregation (test_metrics.py)
- Batch NVQ quality evaluation (test_quality.py)
- Report generation (test_report.py)
- Scenario and result loading (test_fixtures.py)
- End-to-end evaluation runner (test_runner.py)
"""
