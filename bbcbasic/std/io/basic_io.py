import builtins


ZONE_WIDTH = 10


class BasicIO:
    """Console sink and source used by PRINT, INPUT and CLS.

    Output goes through `print` and input through `builtins.input`, so
    both can be captured or replaced (pytest's capsys and monkeypatch).
    The sink remembers the current column for TAB and print zones, and
    the number of lines written for VPOS.
    """
    def __init__(self):
        self.column = 0
        self.row = 0

    def write(self, text: str):
        if not text:
            return
        print(text, end='')
        if '\n' in text:
            self.row += text.count('\n')
            self.column = len(text) - text.rfind('\n') - 1
        else:
            self.column += len(text)

    def newline(self):
        self.write('\n')

    def spaces(self, count: int):
        self.write(' ' * max(count, 0))

    def tab_to(self, column: int):
        """Move to `column`, starting a new line if it is already passed."""
        if column < self.column:
            self.newline()
        self.spaces(column - self.column)

    def next_zone(self):
        self.spaces(ZONE_WIDTH - self.column % ZONE_WIDTH)

    def cls(self):
        # ANSI clear screen and home
        print('\x1b[2J\x1b[H', end='')
        self.column = 0
        self.row = 0

    def read_line(self, prompt: str = '') -> str:
        try:
            text = builtins.input(prompt)
        except EOFError:
            text = ''
        self.column = 0
        self.row += 1
        return text
