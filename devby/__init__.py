"""
companies.devby.io scraper.

Parsing (DevByScraper) is kept apart from I/O (SyncDriver, RetryPipeline,
JsonStore). Runs persist after every company and can be resumed.
"""
