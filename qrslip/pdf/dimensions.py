"""
Payment slip geometry.

All values in millimetres with the origin at the top-left corner of the
210 x 105 mm slip, unless the name ends in _PT (typographic points).
"""

SLIP_WIDTH = 210.0
SLIP_HEIGHT = 105.0
A4_WIDTH = 210.0
A4_HEIGHT = 297.0

MARGIN = 5.0

# Receipt (left part)
RECEIPT_WIDTH = 62.0
RECEIPT_TITLE = (MARGIN, 5.0)
RECEIPT_INFO = (MARGIN, 12.0)
RECEIPT_INFO_WIDTH = 52.0
RECEIPT_INFO_BOTTOM = 68.0
RECEIPT_AMOUNT = (MARGIN, 68.0)
# Offset of the "Amount" column from the "Currency" column, with and without an amount
RECEIPT_AMOUNT_OFFSET = 23.0
RECEIPT_AMOUNT_OFFSET_BLANK = 12.0
RECEIPT_ACCEPTANCE = (RECEIPT_WIDTH - MARGIN, 82.0)

# Payment part (right part)
PAYMENT_X = RECEIPT_WIDTH + MARGIN
PAYMENT_TITLE = (PAYMENT_X, 5.0)
QR_POSITION = (PAYMENT_X, 17.0)
QR_SIZE = 46.0
SWISS_CROSS_SIZE = 7.0
PAYMENT_AMOUNT = (PAYMENT_X, 68.0)
PAYMENT_AMOUNT_OFFSET = 23.0
PAYMENT_AMOUNT_OFFSET_BLANK = 15.0
PAYMENT_INFO = (118.0, 5.0)
PAYMENT_INFO_WIDTH = 87.0
PAYMENT_INFO_BOTTOM = 90.0
ALTERNATIVE_PROCEDURES = (PAYMENT_X, 90.0)
ALTERNATIVE_PROCEDURES_WIDTH = SLIP_WIDTH - PAYMENT_X - MARGIN
ALTERNATIVE_PROCEDURES_BOTTOM = SLIP_HEIGHT - MARGIN

# Blank fields (width, height) drawn with corner marks
RECEIPT_DEBTOR_BOX = (52.0, 20.0)
RECEIPT_AMOUNT_BOX = (30.0, 10.0)
RECEIPT_AMOUNT_BOX_X = 27.0
PAYMENT_DEBTOR_BOX = (65.0, 25.0)
PAYMENT_AMOUNT_BOX = (40.0, 15.0)
PAYMENT_AMOUNT_BOX_X = 78.0
CORNER_MARK_LENGTH = 3.0
CORNER_MARK_WIDTH_PT = 0.75
BLANK_BOX_GAP = 1.5
AMOUNT_BOX_GAP = 2.0

# Separation lines and scissors marks
SEPARATOR_WIDTH_PT = 0.5
TOP_SCISSORS = (105.0, 0.0)
PAYMENT_SCISSORS = (RECEIPT_WIDTH, 20.0)

# Font sizes and line spacing (pt), per slip part
RECEIPT_FONTS = {
    "title": (11, 11),
    "heading": (6, 9),
    "value": (8, 9),
    "amount": (8, 11),
    "acceptance": (6, 8),
}
PAYMENT_FONTS = {
    "title": (11, 11),
    "heading": (8, 11),
    "value": (10, 11),
    "amount": (10, 13),
    "further_information": (7, 8),
}

PT_TO_MM = 25.4 / 72
