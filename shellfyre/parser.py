import logging

from shellfyre.command import APPEND, STDIN, STDOUT, Command, describe_pipeline

logger = logging.getLogger(__name__)

QUOTES = ("'", '"')


def parse_command(line):
    """
    Parse one command line into pipeline stages.
    Trailing `?` marks auto-complete and trailing `&` marks background;
    both apply to every stage of the line.
    Returns: list of Command, never empty (a blank line gives one stage with an empty name)
    """
    line = line.strip()

    auto_complete = line.endswith("?")
    if auto_complete:
        line = line[:-1].rstrip()

    background = line.endswith("&")
    if background:
        line = line[:-1].rstrip()

    tokens = line.split()
    stages = []
    while tokens is not None:
        cmd, tokens = parse_stage(tokens)
        cmd.background = background
        cmd.auto_complete = auto_complete
        stages.append(cmd)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("parsed %r\n%s", line, describe_pipeline(stages))
    return stages


def parse_stage(tokens):
    """
    Build a single Command from the front of a token list.
    Returns: (command, remaining tokens after `|` or None if this was the last stage)
    """
    cmd = Command(name=tokens[0] if tokens else "")
    i = 1
    while i < len(tokens):
        tok = tokens[i]
        i += 1

        if tok == "|":
            return cmd, tokens[i:]

        # handled by parse_command
        if tok == "&":
            continue

        slot, target = split_redirect(tok)
        if slot is not None:
            # `> out.txt` form: the target is the next token
            if not target and i < len(tokens) and tokens[i] not in ("|", "&"):
                target = tokens[i]
                i += 1
            cmd.redirects[slot] = target
            continue

        cmd.args.append(unquote(tok))

    return cmd, None


def split_redirect(tok):
    """Returns (slot, target) for a redirect token, (None, None) otherwise."""
    if tok.startswith("<"):
        return STDIN, tok[1:]
    if tok.startswith(">>"):
        return APPEND, tok[2:]
    if tok.startswith(">"):
        return STDOUT, tok[1:]
    return None, None


def unquote(tok):
    if len(tok) > 2 and tok[0] in QUOTES and tok[-1] == tok[0]:
        return tok[1:-1]
    return tok
