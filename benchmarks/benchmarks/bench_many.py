from bitparsec.Binary import uint
from bitparsec.Char import char
from bitparsec.Prim import many, run_parser


class TimeMany:
    def setup(self):
        self.text_parser = many(char("a"))
        self.binary_parser = many(uint(16, "le"))
        self.small = "a" * 1000
        self.medium = "a" * 10000
        self.large = "a" * 100000
        self.records = b"\x01\x00" * 10000

    def time_many_small(self):
        run_parser(self.text_parser, self.small)

    def time_many_medium(self):
        run_parser(self.text_parser, self.medium)

    def time_many_large(self):
        run_parser(self.text_parser, self.large)

    def time_many_uint16(self):
        run_parser(self.binary_parser, self.records)
