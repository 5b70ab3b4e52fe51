"""
Hiring Module

Job applications submitted through the careers page and the HR review
workflow that follows them.
"""
