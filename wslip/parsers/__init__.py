# This file is part of wslip. See LICENSE file for license information.


def chop_comment(text, comment_chars):
    """Split text into the part before the first comment char and the rest."""
    comment_locations = [text.find(c) for c in comment_chars]
    comment_locations = [c for c in comment_locations if c != -1]
    if not comment_locations:
        return (text, "")
    min_comment = min(comment_locations)
    before_comment = text[0:min_comment]
    comment = text[min_comment:]
    return (before_comment, comment)
