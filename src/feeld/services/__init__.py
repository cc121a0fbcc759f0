"""Service layer: operations returning :class:`ServiceResult`.

Services load definitions, build request-scoped registries and translate
fatal :class:`~feeld.domain.errors.FeeldError` into error results.
"""
