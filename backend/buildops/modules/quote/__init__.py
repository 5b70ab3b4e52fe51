"""Quote requests: submission, admin review and customer decisions."""
