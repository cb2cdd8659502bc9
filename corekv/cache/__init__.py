"""W-TinyLFU cache built from a window LRU, a segmented LRU, a count-min sketch and a bloom filter doorkeeper."""