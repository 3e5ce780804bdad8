#
#
#

from octodns.provider import ProviderException


class PorkbunClientException(ProviderException):
    pass


class PorkbunTransportError(PorkbunClientException):
    '''The request never produced a decodable response.'''

    def __init__(self, context, cause=None):
        self.context = context
        self.cause = cause
        if cause is None:
            super().__init__(context)
        else:
            super().__init__(f'{context}: {cause}')


class PorkbunDeadlineExceeded(PorkbunTransportError):
    '''The caller supplied timeout elapsed before the API answered.'''


class PorkbunApiError(PorkbunClientException):
    def __init__(self, message):
        self.message = message
        super().__init__(message)


class PorkbunUnexpectedStatus(PorkbunClientException):
    def __init__(self, got):
        self.got = got
        super().__init__(
            f"Unexpected response status, expected 'SUCCESS' or 'ERROR', "
            f"got {got!r}"
        )


class PorkbunConversionError(PorkbunClientException):
    def __init__(self, field, value, reason=None):
        self.field = field
        self.value = value
        self.reason = reason
        msg = f'Invalid value for {field}: {value!r}'
        if reason:
            msg = f'{msg} ({reason})'
        super().__init__(msg)


class PorkbunProviderException(ProviderException):
    pass
