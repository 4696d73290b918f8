"""
VocabList Backend - Services Layer
====================================

Service Inventory (leaves first):
    - DocumentStore (abstract) / SQLDocumentStore: hierarchical documents on SQL
    - AssetStore (abstract) / LocalAssetStore: cover image blobs
    - TranslationLookup (abstract) / StoreTranslationLookup: words, translations,
      capture languages
    - keys: deterministic ids and document paths
    - ItemStore: items nested under a list, wordCount maintenance
    - ShareCodeRegistry: opaque share tokens (issue, resolve, revoke)
    - ListStore: list CRUD, cover images, default list, delete cascade
    - LanguageListManager: one aggregation list per (owner, language)
    - MultiListInserter: one word into up to K lists with per-target outcomes
    - ImportEngine: private copy of a shared list

Each service takes its collaborators as constructor arguments and falls back
to the module-level singletons, so tests can substitute any of them.
"""
