"""
Document Intake Quality Tools.

This package provides tools for measuring how well automatic extraction
holds up under human review:
- Comparing extracted values with reviewer-accepted values
- Classifying field outcomes (correct, wrong, missed, hallucinated)
- Aggregating observed accuracy across reviewed documents
"""
