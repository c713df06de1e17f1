# Content Engine: Airtable → Markdown build steps
"""
Build-time content modules, run in this order by the pipeline:
- content_sync: Airtable Posts → Markdown files with front matter
- affiliate_injector: affiliate tokens → URLs, links, buttons, cards
- verifier: fail the build when tokens survive injection

Supporting modules:
- airtable_reader: paginated Airtable reads
- field_resolver: relaxed column lookup, SKU normalization
- link_builder: affiliate row selection and tracked URL building
"""
