"""Engine — probe execution and report rendering."""
