from typing import List


def _dollar_tag(s: str, j: int) -> str:
    """Return the dollar-quote tag ('$$' or '$tag$') starting at s[j], or ''."""
    k = j + 1
    while k < len(s) and (s[k].isalnum() or s[k] == "_"):
        k += 1
    if k < len(s) and s[k] == "$" and not s[j + 1:j + 2].isdigit():
        return s[j:k + 1]
    return ""


def split_statements(sql: str) -> List[str]:
    """
    Split a SQL script into statements.

    Supported features:
      - Default ';' delimiter.
      - 'DELIMITER <token>' lines change the statement delimiter and are not emitted.
      - PostgreSQL dollar-quoted bodies $$...$$ or $tag$...$tag$ (positional
        parameters like $1 are not tags).
      - A line holding only 'GO' (case-insensitive) ends the current batch.
      - Comments: '-- ...' and '/* ... */'; they stay part of the statement text.
      - Quoted strings and identifiers: '...', "..." and `...`, with doubled quotes as escapes.

    Returns:
      A list of statements (without trailing delimiters), stripped of leading/trailing
      whitespace. Empty statements and comment-only fragments are not included.
    """
    stmts: List[str] = []
    buf: List[str] = []
    delimiter = ";"
    quote = ""          # active quote char: ', " or `
    dollar_tag = ""     # active dollar tag
    in_block_comment = False

    def emit():
        stmt = "".join(buf).strip()
        buf.clear()
        if stmt and not _only_comments(stmt):
            stmts.append(stmt)

    for line in sql.splitlines(keepends=True):
        stripped = line.strip()
        if not (quote or dollar_tag or in_block_comment):
            lowered = stripped.lower()
            if lowered.startswith("delimiter ") and len(stripped.split()) == 2:
                delimiter = stripped.split()[1]
                continue
            if lowered == "go":
                emit()
                continue

        j, n = 0, len(line)
        while j < n:
            ch = line[j]
            nxt = line[j + 1] if j + 1 < n else ""

            if in_block_comment:
                if ch == "*" and nxt == "/":
                    buf.append("*/")
                    j += 2
                    in_block_comment = False
                else:
                    buf.append(ch)
                    j += 1
                continue

            if quote:
                buf.append(ch)
                j += 1
                if ch == quote:
                    if j < n and line[j] == quote:  # doubled quote is an escape
                        buf.append(quote)
                        j += 1
                    else:
                        quote = ""
                continue

            if dollar_tag:
                if line.startswith(dollar_tag, j):
                    buf.append(dollar_tag)
                    j += len(dollar_tag)
                    dollar_tag = ""
                else:
                    buf.append(ch)
                    j += 1
                continue

            if ch == "-" and nxt == "-":
                buf.append(line[j:])
                break
            if ch == "/" and nxt == "*":
                in_block_comment = True
                buf.append("/*")
                j += 2
                continue
            if ch in ("'", '"', "`"):
                quote = ch
                buf.append(ch)
                j += 1
                continue
            if ch == "$":
                tag = _dollar_tag(line, j)
                if tag:
                    dollar_tag = tag
                    buf.append(tag)
                    j += len(tag)
                    continue
            if line.startswith(delimiter, j):
                emit()
                j += len(delimiter)
                continue

            buf.append(ch)
            j += 1

    # scripts without a final delimiter
    emit()
    return stmts


def _only_comments(stmt: str) -> bool:
    i, n = 0, len(stmt)
    while i < n:
        if stmt[i].isspace():
            i += 1
        elif stmt.startswith("--", i):
            j = stmt.find("\n", i)
            i = n if j == -1 else j + 1
        elif stmt.startswith("/*", i):
            j = stmt.find("*/", i + 2)
            i = n if j == -1 else j + 2
        else:
            return False
    return True
