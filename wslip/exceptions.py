# This file is part of wslip. See LICENSE file for license information.


class WslIpError(Exception):
    pass


class InvalidAddressError(WslIpError):
    """Address is malformed or not usable inside the configured subnet."""


class ConflictError(WslIpError):
    """Address or setting is already held by another instance."""


class DuplicateValueError(ConflictError):
    def __init__(self, section, key, value, owner):
        self.section = section
        self.key = key
        self.value = value
        self.owner = owner
        super().__init__(
            "Value '%s' for '%s' in section [%s] is already used by '%s'"
            % (value, key, section, owner)
        )


class AddressSpaceExhaustedError(WslIpError):
    pass


class ParseError(WslIpError):
    def __init__(self, msg, path=None, line_number=None):
        self.path = path
        self.line_number = line_number
        location = ""
        if path:
            location = str(path)
        if line_number is not None:
            location += "%sline %s" % (", " if location else "", line_number)
        if location:
            msg = "%s (%s)" % (msg, location)
        super().__init__(msg)
