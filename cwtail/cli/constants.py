# cwtail/cli/constants.py
"""CLI constants and styling."""

# ASCII Banner
BANNER = r"""
    [bold #5e81ac]┏━╸╻ ╻╺┳╸┏━┓╻╻[/]
    [bold #88c0d0]┃  ┃╻┃ ┃ ┣━┫┃┃[/]
    [bold #8fbcbb]┗━╸┗┻┛ ╹ ╹ ╹╹┗━╸[/]
    [#4c566a]follow your log streams, in order[/#4c566a]
"""

DEFAULT_STREAM = "*"
