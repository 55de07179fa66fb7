"""HTTP front end for yolo_detect: upload an image, get labeled boxes back as JSON."""
