"""Reviews app package.

Blind reviews: after a completed stay the guest and the host each review
the other. A review stays hidden from everyone but its author until both
reviews exist or the disclosure period after check-out has passed.
"""
