# students/exceptions.py


class PromotionError(Exception):
    """
    A promotion, graduation, transfer or enrollment batch failed and was
    rolled back. The triggering exception is chained as __cause__.
    """
