def to_local(text):
    if text is None:
        return None
    if not isinstance(text, str):
        text = text.decode("utf-8")
    text = text.replace("\r\n", "\n")
    return text


to_str = to_local


def is_blank(body) -> bool:
    """
    True for None and for bodies holding nothing but whitespace
    (str or bytes).
    """
    if body is None:
        return True
    return not body.strip()
