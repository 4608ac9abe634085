"""
Branch (syubiyah) scoping for content visibility.

Independent of permission resolution: answers whether a record is relevant
to an actor's branch, never whether the actor may act on it.
"""
