"""
Test Suite for the JMX agent smoke harness

Test Structure:
- unit/: scrape retry loop, metric assertions, configuration, artifacts,
  container lifecycle (testcontainers mocked) and the CLI
- integration/: the agent smoke tests against real Java base images

Running Tests:
    pytest -m unit                 # No Docker needed
    pytest -m docker               # Builds and runs the base images
    pytest tests/unit/test_scrape.py

Markers are declared in pyproject.toml.
"""
