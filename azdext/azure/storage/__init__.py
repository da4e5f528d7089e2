"""Azure Storage blob container and file share helpers."""