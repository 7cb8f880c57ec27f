#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the Diarist project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in different subsystems.

Exception Hierarchy:
    Exception (built-in)
    └── DiaristError - Base for all project errors
        ├── IdentifierParseError - Entry identifier could not be parsed
        ├── CardParseError - Fenced card block is malformed
        ├── AttachmentResolutionError - Attachment lookup failed
        ├── ProtectedContentError - Base for protected payload errors
        │   ├── PayloadFormatError - Envelope is malformed ("broken content")
        │   └── AuthenticationError - Wrong password or tampered payload
        ├── RenderError - Markdown/HTML render pipeline failures
        ├── PaginationFetchError - Diary page could not be fetched
        └── DiaryBuildError - Diary assembly/build failures

Most of these never leave the pass that raised them: parse and resolution
errors degrade to safe defaults inside their component. AuthenticationError
is the exception; it always reaches the caller.

Usage:
    from diarist.core.exceptions import AuthenticationError, PayloadFormatError

    try:
        text = decrypt_post_content(payload, password)
    except AuthenticationError:
        click.echo("Wrong password")
    except PayloadFormatError:
        click.echo("Broken content")
"""


class DiaristError(Exception):
    """
    Base exception for all Diarist errors.

    Catch this to handle any project error, or catch specific
    subclasses for more granular error handling.
    """

    pass


class IdentifierParseError(DiaristError):
    """
    Exception for entry identifiers that match no parsing strategy.

    Raised by ``parse_dates``; ``parse_diary_identifier`` catches it and
    degrades to the sentinel date.

    Examples:
        >>> raise IdentifierParseError("No valid date in 'notes.md'")
    """

    pass


class CardParseError(DiaristError):
    """
    Exception for malformed fenced card blocks.

    Raised when a ``card-link`` or ``card-<media>`` block lacks its
    required keys. Contained to the offending block; the block is left
    untouched in the rendered document.

    Examples:
        >>> raise CardParseError("card-link block is missing 'url'")
    """

    pass


class AttachmentResolutionError(DiaristError):
    """
    Exception for attachment references that resolve nowhere.

    Raised by the resolver strategies and caught by
    ``AttachmentResolver.resolve``, which returns the reference unchanged.
    """

    pass


class ProtectedContentError(DiaristError):
    """
    Base exception for protected (encrypted) post payloads.

    See Also:
        PayloadFormatError, AuthenticationError
    """

    pass


class PayloadFormatError(ProtectedContentError):
    """
    Exception for encrypted payloads that are not a valid envelope.

    Raised when:
    - Required fields are missing
    - The version, algorithm or digest is not supported
    - Binary fields are not valid base64

    Callers should present this as "broken content".

    Examples:
        >>> raise PayloadFormatError("Unsupported payload version: 2")
    """

    pass


class AuthenticationError(ProtectedContentError):
    """
    Exception for failed authenticated decryption.

    Raised when the password is wrong or the ciphertext/tag was altered.
    Decryption fails closed: no partial plaintext is ever returned.
    Callers should present this as "wrong password".

    Examples:
        >>> raise AuthenticationError("Payload authentication failed")
    """

    pass


class RenderError(DiaristError):
    """
    Exception for failures inside the markdown-to-HTML render pipeline.

    Raised by ``PipelineContext.render``. Protected posts catch it and fall
    back to escaped plaintext; the diary builder skips the entry.
    """

    pass


class PaginationFetchError(DiaristError):
    """
    Exception for diary page fetch failures.

    Raised when:
    - The transport fails (connection, timeout)
    - The server answers with a non-2xx status
    - The body is not the expected JSON page shape

    Examples:
        >>> raise PaginationFetchError("GET /api/diary/3.json returned 500")
    """

    pass


class DiaryBuildError(DiaristError):
    """
    Exception for diary assembly failures.

    Raised when the diary directory is missing or page files cannot be
    written.
    """

    pass
