"""
EditorUILib - Desktop editor window

PyQt5 front end for the edit pipeline. Importing this package requires
PyQt5; the pipeline itself does not.
"""
