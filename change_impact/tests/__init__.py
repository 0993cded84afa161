"""
Change Impact Test Suite

Test modules:
- test_analyzer: keyword, value stream and risk detection; scoring formulas
- test_classifier: tier priority, delay bounds, threshold fallback, end-to-end predictions
- test_records: operator overrides, record shaping and the prediction store adapter
- test_enhancement: AI second opinion parsing and fallback (mocked client)
- test_api: HTTP contract of the FastAPI routes

Running Tests:
    pip install -e ".[test]"
    pytest change_impact/tests
"""
