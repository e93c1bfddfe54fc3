# Services package init
"""
FileRelay — Services Layer
===========================

What:  The relay pipeline, one service per external boundary.

Service Inventory:
    - validation:          fileUrl and configuration checks
    - FetchService:        bounded download of the source file
    - FileService:         temp file staging and cleanup
    - ExtractionService:   multipart upload to the extraction API
    - StorageService:      JSON upload to the object store (storage mode)
    - RelayService:        runs the pipeline for one request
"""
