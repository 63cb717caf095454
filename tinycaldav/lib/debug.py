from lxml import etree


def xmlstring(root):
    """
    Pretty-prints XML for logs and communication dumps.  Anything that
    isn't XML (iCalendar text, HTML error pages, truncated bodies) is
    passed through as text.
    """
    if isinstance(root, bytes):
        try:
            root = etree.fromstring(root)
        except etree.XMLSyntaxError:
            return root.decode("utf-8", errors="replace")
    if isinstance(root, str):
        return root
    try:
        return etree.tostring(root, pretty_print=True).decode("utf-8")
    except TypeError:
        return str(root)
